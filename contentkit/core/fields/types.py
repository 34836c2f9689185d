"""
Built-in field types.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from markupsafe import escape

from contentkit.core.fields.base import Field


class PlainText(Field):
    """Single or multi-line text."""

    def __init__(self, multiline: bool = False, char_limit: Optional[int] = None, **config: Any) -> None:
        self.multiline = multiline
        self.char_limit = char_limit
        super().__init__(**config)

    @classmethod
    def value_type(cls) -> str:
        return "string|null"

    def get_content_column_type(self) -> str:
        return "text"

    def normalize_value(self, value: Any, element: Any = None) -> Any:
        if value is None or value == "":
            return None
        value = str(value)
        if self.char_limit is not None:
            value = value[: self.char_limit]
        return value

    def input_html(self, value: Any, element: Any = None) -> str:
        if self.multiline:
            return super().input_html(value, element)
        content = "" if value is None else value
        return f'<input type="text" name="{escape(self.handle or "")}" value="{escape(content)}">'


class Number(Field):
    """Numeric values, stored as decimals."""

    def __init__(self, decimals: int = 0, **config: Any) -> None:
        self.decimals = decimals
        super().__init__(**config)

    @classmethod
    def value_type(cls) -> str:
        return "int|float|null"

    def get_content_column_type(self) -> str:
        return "decimal"

    def normalize_value(self, value: Any, element: Any = None) -> Optional[Decimal]:
        if value is None or value == "":
            return None
        if isinstance(value, Decimal):
            return value
        try:
            return Decimal(str(value).replace(",", "").strip())
        except InvalidOperation:
            return None

    def serialize_value(self, value: Any, element: Any = None) -> Any:
        if isinstance(value, Decimal):
            return str(value)
        return super().serialize_value(value, element)

    def input_html(self, value: Any, element: Any = None) -> str:
        content = "" if value is None else value
        return f'<input type="number" name="{escape(self.handle or "")}" value="{escape(content)}">'

    def get_content_gql_type(self) -> Any:
        return "Number"


class Lightswitch(Field):
    """On/off toggle."""

    def __init__(self, default: bool = False, **config: Any) -> None:
        self.default = default
        super().__init__(**config)

    @classmethod
    def value_type(cls) -> str:
        return "bool"

    def get_content_column_type(self) -> str:
        return "boolean"

    def normalize_value(self, value: Any, element: Any = None) -> bool:
        if value is None:
            return self.default if self.is_fresh(element) else False
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "on", "yes"}
        return bool(value)

    def input_html(self, value: Any, element: Any = None) -> str:
        checked = " checked" if value else ""
        return f'<input type="checkbox" name="{escape(self.handle or "")}" value="1"{checked}>'

    def search_keywords(self, value: Any, element: Any) -> str:
        return "1" if value else ""

    def get_content_gql_type(self) -> Any:
        return "Boolean"


class Table(Field):
    """Rows of column values, stored outside the content table."""

    eager_loading = True

    def __init__(self, columns: Optional[List[str]] = None, **config: Any) -> None:
        self.columns = columns or []
        super().__init__(**config)

    @classmethod
    def has_content_column(cls) -> bool:
        return False

    @classmethod
    def value_type(cls) -> str:
        return "array"

    def normalize_value(self, value: Any, element: Any = None) -> List[Dict[str, Any]]:
        if not value:
            return []
        if isinstance(value, dict):
            # indexed form posts arrive as {"0": row, "1": row}
            value = list(value.values())
        return [self._normalize_row(row) for row in value]

    def _normalize_row(self, row: Any) -> Dict[str, Any]:
        if isinstance(row, dict):
            if not self.columns:
                return dict(row)
            return {column: row.get(column) for column in self.columns}

        cells = list(row)
        if not self.columns:
            return {str(i): cell for i, cell in enumerate(cells)}
        return {
            column: cells[i] if i < len(cells) else None
            for i, column in enumerate(self.columns)
        }

    def input_html(self, value: Any, element: Any = None) -> str:
        handle = escape(self.handle or "")
        rows = []
        for i, row in enumerate(self.normalize_value(value)):
            cells = "".join(
                f'<td><input type="text" name="{handle}[{i}][{escape(column)}]" '
                f'value="{escape("" if cell is None else cell)}"></td>'
                for column, cell in row.items()
            )
            rows.append(f"<tr>{cells}</tr>")
        return f'<table id="{handle}">{"".join(rows)}</table>'
