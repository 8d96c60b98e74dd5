class TableError(Exception):
    """Base class for errors raised by the table engine."""


class ValidationError(TableError, ValueError):
    """A cell value could not be coerced to its column type."""


class DuplicateColumnError(TableError):
    def __init__(self, column_id: str):
        self.column_id = column_id
        super().__init__(f"Column '{column_id}' already exists")


class DuplicateRowError(TableError):
    def __init__(self, row_id: str):
        self.row_id = row_id
        super().__init__(f"Row '{row_id}' already exists")


class ImportFormatError(TableError):
    def __init__(self, source: str):
        self.source = source
        super().__init__("Please select a valid CSV file")


class ParseError(TableError):
    def __init__(self, message: str):
        self.message = message
        super().__init__(f"CSV parsing errors: {message}")


class EmptyImportError(TableError):
    def __init__(self):
        super().__init__("No valid data found in CSV file")


class ImportInProgressError(TableError):
    def __init__(self):
        super().__init__("An import is already running")
