from typing import Any, Callable

# A handler consumes one exchange. Transforms wrap the rest of the chain.
Handler = Callable[[Any], None]
Transform = Callable[[Handler], Handler]
