class Doctype:
    __slots__ = ("name", "public_id", "system_id")

    def __init__(self, name=None, public_id=None, system_id=None):
        self.name = name
        self.public_id = public_id
        self.system_id = system_id

    def __repr__(self):
        return f"Doctype({self.name!r}, public_id={self.public_id!r}, system_id={self.system_id!r})"


class ParseError:
    """Represents a parse error with location information."""

    __slots__ = ("code", "column", "line", "message")

    def __init__(self, code, line=None, column=None, message=None):
        self.code = code
        self.line = line
        self.column = column
        self.message = message or code

    def __repr__(self):
        if self.line is not None and self.column is not None:
            return f"ParseError({self.code!r}, line={self.line}, column={self.column})"
        return f"ParseError({self.code!r})"

    def __str__(self):
        if self.line is not None and self.column is not None:
            if self.message != self.code:
                return f"({self.line},{self.column}): {self.code} - {self.message}"
            return f"({self.line},{self.column}): {self.code}"
        if self.message != self.code:
            return f"{self.code} - {self.message}"
        return self.code

    def __eq__(self, other):
        if not isinstance(other, ParseError):
            return NotImplemented
        return self.code == other.code and self.line == other.line and self.column == other.column

    __hash__ = None  # Unhashable since we define __eq__


class ParseErrorList(list):
    """A list of ParseErrors that stops growing once `max_size` is reached."""

    __slots__ = ("max_size",)

    def __init__(self, max_size=0):
        super().__init__()
        self.max_size = max_size

    @classmethod
    def tracking(cls, max_size):
        return cls(max_size)

    @classmethod
    def no_tracking(cls):
        return cls(0)

    def can_add_error(self):
        return len(self) < self.max_size

    def add(self, error):
        if self.can_add_error():
            self.append(error)
            return True
        return False
