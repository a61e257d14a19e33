class RecordError(Exception):
    """Base error for record operations.

    ``title`` is the short, schema-qualified summary shown to the admin
    (e.g. "Colleges: create failed") and ``detail`` the underlying message.
    """

    status_code = 400
    default_title = "request failed"

    def __init__(self, detail, title=None, status_code=None):
        super().__init__(detail)
        self.detail = detail
        self.title = title or self.default_title
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"error": self.title, "detail": self.detail}


class StoreError(RecordError):
    """Store call failed; 400 when the store rejected the data itself."""

    status_code = 500
    default_title = "store error"


class CoercionError(RecordError):
    default_title = "invalid input"

    def __init__(self, detail, title=None, label=None):
        super().__init__(detail, title)
        self.label = label


class ImportFormatError(RecordError):
    default_title = "import failed"
