class SchemaError(Exception):
    def __init__(self, message: str, missing_fields: list[str] | None = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []


class ParseError(ValueError):
    def __init__(self, message: str, table: str | None = None, rows: int = 0):
        super().__init__(message)
        self.table = table
        self.rows = rows


class ModelFitError(Exception):
    pass
