"""Exception types shared by the FLVER and MSB codecs."""


class FormatError(ValueError):
    """Structural error: the data does not match the expected layout.

    Raised for assertion mismatches, unknown record tags, claim violations,
    capability/offset contradictions and truncated data. Aborts the current
    load or save call.
    """

    def __init__(self, message, field=None, expected=None, observed=None):
        super().__init__(message)
        self.field = field
        self.expected = expected
        self.observed = observed


class UnsupportedFormatError(NotImplementedError):
    """The data is well formed but uses a feature this codec cannot handle."""


class ReservationError(RuntimeError):
    """Misuse of the writer's reservation table (a bug, not bad content)."""
