class Section(object):
    def __init__(self, params):
        self.params = params

    def validate(self, obj):
        if not isinstance(obj, dict):
            raise ValueError
        for param in obj:
            if param not in self.params:
                raise ValueError("Unknown parameter '{}'".format(param))
            try:
                self.params[param].validate(obj[param])
            except ValueError as exc:
                if len(str(exc)) == 0:
                    raise ValueError(
                        "Invalid value for parameter '{}'. Expected: {}".format(
                            param, self.params[param].description()
                        )
                    )
                raise
        return obj

    def description(self):
        return "Section"


class TypeValidator(object):
    type = object
    name = "Any value"

    def validate(self, obj):
        if not isinstance(obj, self.type):
            raise ValueError
        return obj

    def description(self):
        return self.name


class Bool(TypeValidator):
    type = bool
    name = "Boolean"


class String(TypeValidator):
    type = str
    name = "String"


# Almost any string is a valid path or shell command,
# these two mostly exist to document the parameter
class Path(String):
    name = "Path"


class Command(String):
    name = "Command"


class CommandTemplate(Command):
    """A shell command with str.format placeholders. Literal braces are doubled."""

    def __init__(self, *placeholders):
        self.placeholders = placeholders

    def validate(self, obj):
        super().validate(obj)
        try:
            obj.format(**{name: "" for name in self.placeholders})
        except (KeyError, IndexError, ValueError, AttributeError) as exc:
            raise ValueError(
                "Invalid command template '{}': {}. Placeholders: {}".format(
                    obj,
                    exc,
                    ", ".join("{" + name + "}" for name in self.placeholders),
                )
            )
        return obj

    def description(self):
        return "Command template"


class Choice(object):
    def __init__(self, *choices):
        self.choices = choices

    def validate(self, obj):
        if not obj in self.choices:
            raise ValueError
        return obj

    def description(self):
        return "One of [{}]".format(", ".join(self.choices))


class List(object):
    def __init__(self, value_validator, allow_empty=True):
        self.value_validator = value_validator
        self.allow_empty = allow_empty

    def validate(self, obj):
        if not isinstance(obj, list):
            raise ValueError
        if not self.allow_empty and len(obj) == 0:
            raise ValueError
        for value in obj:
            self.value_validator.validate(value)
        return obj

    def description(self):
        return "{}List({})".format(
            "" if self.allow_empty else "Non-empty ", self.value_validator.description()
        )
