from typing import Any, Dict, Iterator, Optional
import threading


class Context:
    """
    Key/value bag scoped to a single exchange.

    Features:
        - Access by attributes: context.user
        - Mapping access: context["user"], "user" in context
        - Initialization from a dict: Context({"a": 1})
        - clear() at the end of the exchange

    NOTE: A Context lives as long as its exchange; nothing here is shared
    between exchanges.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})
        self._lock = threading.Lock()

    # Access by attributes (read)
    def __getattr__(self, name: str) -> Any:
        # called only if the attribute is not in __dict__
        if name.startswith("_"):
            raise AttributeError(name)
        with self._lock:
            if name in self._data:
                return self._data[name]
        raise AttributeError(f"Context has no attribute '{name}'")

    # Access by attributes (write)
    def __setattr__(self, name: str, value: Any) -> None:
        # protect internal attributes
        if name in ("_data", "_lock"):
            object.__setattr__(self, name, value)
            return
        with self._lock:
            self._data[name] = value

    def __delattr__(self, name: str) -> None:
        with self._lock:
            if name in self._data:
                del self._data[name]
                return
        raise AttributeError(f"Context has no attribute '{name}'")

    def __getitem__(self, key: str) -> Any:
        with self._lock:
            return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        with self._lock:
            del self._data[key]

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self.to_dict())

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    # Dict-like helpers
    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def get_ok(self, key: str):
        """Return (value, True) when the key is set, (None, False) otherwise."""
        with self._lock:
            if key in self._data:
                return self._data[key], True
            return None, False

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def update(self, mapping: Dict[str, Any]) -> None:
        with self._lock:
            self._data.update(mapping)

    def pop(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.pop(key, default)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._data)

    def __repr__(self) -> str:
        return f"<Context {sorted(self.to_dict())}>"
