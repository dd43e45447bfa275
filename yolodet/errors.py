"""
Exception types raised by the detection engine.

Both types subclass a builtin so callers that already catch ValueError
or LookupError keep working, while still being able to tell a bad
configuration apart from a model/label mismatch.
"""


class ConfigurationError(ValueError):
    """A threshold or other configuration value is outside its valid range."""


class LabelLookupError(LookupError):
    """A decoded class id has no entry in the label list.

    This means the label file does not match the model's class count.
    """

    def __init__(self, class_id: int, num_labels: int) -> None:
        self.class_id = class_id
        self.num_labels = num_labels
        super().__init__(
            f"Class id {class_id} has no label: the label list only has "
            f"{num_labels} entries. Check that the labels file matches the model."
        )
