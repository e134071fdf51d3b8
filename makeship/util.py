import os
import shutil
import sys


def eprint(*args, **kwargs):
    print(*args, **kwargs, file=sys.stderr)


def format_slug(name):
    # itch.io slugs: lower case, spaces replaced by hyphens
    return name.lower().replace(" ", "-")


def game_url(organization, game):
    return format_slug("https://{}.itch.io/{}".format(organization, game))


def prompt(prompt_str, default=None):
    default_str = ""
    if default != None:
        default_str = " [{}]".format(default)
    while True:
        sys.stdout.write(prompt_str + default_str + ": ")
        s = input().strip()
        if s:
            return s
        elif default != None:
            return default


def replace_path(path):
    """Remove whatever is at path (file or directory tree) and create an empty directory there."""
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    elif os.path.lexists(path):
        os.remove(path)
    os.makedirs(path)
