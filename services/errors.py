class IngestionError(ValueError):
    """Base class for problems with an uploaded file."""


class ParseError(IngestionError):
    """The file is malformed, unreadable or of an unsupported type."""


class EmptyDataError(IngestionError):
    """The file parsed but holds no data rows."""


class AxisNotFoundError(LookupError):
    def __init__(self, axis: str):
        super().__init__(f"Column '{axis}' not found. Please reselect the chart axes.")
        self.axis = axis


class RecordNotFoundError(LookupError):
    pass
