"""Case-insensitive, multi-value header container."""

from typing import BinaryIO, Iterable, Iterator, Mapping, Optional, Union

HeaderValues = Union[str, int, float, Iterable[Union[str, int, float]]]
HeaderSource = Union["HeaderMap", Mapping[str, HeaderValues], Iterable[tuple[str, str]]]

_NEWLINES = str.maketrans({"\r": " ", "\n": " "})


def _sanitize_value(value: str) -> str:
    return str(value).translate(_NEWLINES).strip(" \t")


class HeaderMap:
    """Header name to values mapping.

    Lookups ignore case. The first spelling seen for a name is the one
    written on the wire, and the values of one name keep their insertion
    order.
    """

    def __init__(self, headers: Optional[HeaderSource] = None):
        self._fields: dict[str, tuple[str, list[str]]] = {}
        if headers is not None:
            self.update(headers)

    def add(self, name: str, value) -> None:
        """Append a value for name."""
        key = name.lower()
        if key not in self._fields:
            self._fields[key] = (name, [])
        self._fields[key][1].append(str(value))

    def set(self, name: str, value) -> None:
        """Replace all values for name with a single value."""
        self._fields[name.lower()] = (name, [str(value)])

    def update(self, headers: HeaderSource) -> None:
        """Add every value from a mapping, another HeaderMap, or (name, value) pairs."""
        if isinstance(headers, HeaderMap):
            pairs = headers.items()
        elif isinstance(headers, Mapping):
            pairs = []
            for name, values in headers.items():
                if isinstance(values, (str, bytes, int, float)):
                    values = [values]
                pairs.extend((name, v) for v in values)
        else:
            pairs = headers
        for name, value in pairs:
            if isinstance(value, bytes):
                value = value.decode("latin-1")
            self.add(name, value)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """First value for name, or default."""
        field = self._fields.get(name.lower())
        if field is None or not field[1]:
            return default
        return field[1][0]

    def get_all(self, name: str) -> list[str]:
        field = self._fields.get(name.lower())
        return list(field[1]) if field else []

    def items(self) -> list[tuple[str, str]]:
        """Flattened (name, value) pairs in insertion order."""
        return [(name, v) for name, values in self._fields.values() for v in values]

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(values) for name, values in self._fields.values()}

    def write(self, buf: BinaryIO, encoding: str = "latin-1") -> None:
        """Write one ``Name: value\\r\\n`` line per value, names sorted."""
        for key in sorted(self._fields):
            name, values = self._fields[key]
            for value in values:
                buf.write(f"{name}: {_sanitize_value(value)}\r\n".encode(encoding))

    def copy(self) -> "HeaderMap":
        return HeaderMap(self)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(name for name, _ in self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderMap):
            return NotImplemented
        return {k: v[1] for k, v in self._fields.items()} == {
            k: v[1] for k, v in other._fields.items()
        }

    def __repr__(self) -> str:
        return f"HeaderMap({self.to_dict()!r})"
