"""Flat variable namespace for one interpreter."""

from typing import Dict, Iterator, Optional, Union

from neurodsl.runtime.values import Text, Value, coerce


class Environment:
    """Maps variable names to values. Assignment overwrites; there are no scopes.

    Every stored value is the trimmed rendering of what was assigned, re-tagged
    with ``coerce``.
    """

    def __init__(self):
        self._values: Dict[str, Value] = {}

    def set(self, name: str, value: Union[Value, str]) -> Value:
        text = value if isinstance(value, str) else value.render()
        stored = coerce(text.strip())
        self._values[name] = stored
        return stored

    def get(self, name: str) -> Optional[Value]:
        return self._values.get(name)

    def text(self, name: str) -> Optional[str]:
        value = self._values.get(name)
        return value.render() if value is not None else None

    def resolve(self, token: str) -> str:
        """Value of the variable ``token``, or ``token`` itself when unbound."""
        found = self.text(token)
        return found if found is not None else token

    def lookup(self, token: str) -> Value:
        value = self._values.get(token)
        return value if value is not None else Text(token)

    def snapshot(self) -> Dict[str, str]:
        return {name: value.render() for name, value in self._values.items()}

    def clear(self) -> None:
        self._values.clear()

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)
