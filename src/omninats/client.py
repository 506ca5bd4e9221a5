"""
Declarative NATS clients.

An interface class marked with :func:`nats_client` declares one coroutine
method per message it sends. :class:`ClientBuilder` inspects the interface
once, validates every method and builds a concrete subclass whose methods
encode the body through a :class:`~omninats.serdes.SerDesRegistry` and hand
it to the transport.

Example:
    >>> @nats_client(connection="orders")
    ... class OrderClient:
    ...     @subject("orders.created")
    ...     async def created(self, order: Order) -> None: ...
    ...
    ...     @subject("orders.price")
    ...     async def price(self, sku: str) -> float: ...
    ...
    ...     async def send(self, target: Annotated[str, Subject], order: Order) -> None: ...
    >>>
    >>> client = ClientBuilder(registry, connections).build(OrderClient)
    >>> await client.created(Order(sku="A-1", quantity=2))
"""

from __future__ import annotations

import inspect
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from msgspec import Struct

from .exceptions import ClientDefinitionError
from .logging import get_logger
from .models import ClientOptions, OutgoingMessage, Payload, ReceivedMessage
from .serdes import SerDesRegistry
from .transport import ConnectionManager

CLIENT_OPTIONS_ATTR = "__nats_client__"
SUBJECT_ATTR = "__nats_subject__"


class Subject:
    """Marks a parameter as the destination subject: ``Annotated[str, Subject]``."""


class Headers:
    """Marks a parameter as message headers: ``Annotated[dict[str, str], Headers]``."""


def nats_client(cls: Optional[type] = None, *, connection: str = "") -> Any:
    """
    Mark a class as a NATS client interface.

    Args:
        connection: Name of the connection to publish on. Empty uses the
            default connection.

    Usable bare (``@nats_client``) or with arguments
    (``@nats_client(connection="audit")``).
    """

    def decorate(klass: type) -> type:
        if not inspect.isclass(klass):
            raise ClientDefinitionError(f"@nats_client can only decorate classes, got {klass!r}")
        setattr(klass, CLIENT_OPTIONS_ATTR, ClientOptions(connection=connection))
        return klass

    if cls is not None:
        return decorate(cls)
    return decorate


def subject(name: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Fix the subject a client method publishes to."""
    if not name:
        raise ClientDefinitionError("Subject name must not be empty")

    def decorate(func: Callable[..., Any]) -> Callable[..., Any]:
        setattr(func, SUBJECT_ATTR, name)
        return func

    return decorate


def client_options(cls: type) -> Optional[ClientOptions]:
    """Options set by ``@nats_client``, or None if the class is not marked."""
    return cls.__dict__.get(CLIENT_OPTIONS_ATTR) or getattr(cls, CLIENT_OPTIONS_ATTR, None)


def _marker(annotation: Any) -> Optional[type]:
    if get_origin(annotation) is Union:
        # Optional[Annotated[...]] from a None default on older interpreters
        for arg in get_args(annotation):
            found = _marker(arg)
            if found is not None:
                return found
        return None
    if get_origin(annotation) is Annotated:
        for meta in get_args(annotation)[1:]:
            if meta is Subject or isinstance(meta, Subject):
                return Subject
            if meta is Headers or isinstance(meta, Headers):
                return Headers
    return None


class MethodBinding(Struct, frozen=True):
    """How one interface method maps onto a message."""

    name: str
    subject: Optional[str] = None
    subject_param: Optional[str] = None
    headers_param: Optional[str] = None
    body_param: Optional[str] = None
    body_type: Any = None
    reply_type: Any = None
    expects_reply: bool = False

    def resolve(self, arguments: Dict[str, Any]) -> tuple[str, Any, Optional[Dict[str, str]]]:
        """Pick subject, body and headers out of bound call arguments."""
        target = self.subject
        if self.subject_param is not None and arguments.get(self.subject_param):
            target = arguments[self.subject_param]
        if not target:
            raise ValueError(f"No subject given for '{self.name}'")
        body = arguments.get(self.body_param) if self.body_param else None
        headers = arguments.get(self.headers_param) if self.headers_param else None
        return target, body, headers


def bind_method(name: str, func: Callable[..., Any]) -> MethodBinding:
    """
    Inspect an interface method and describe how it maps onto a message.

    Raises:
        ClientDefinitionError: If the method cannot be mapped
    """
    if not inspect.iscoroutinefunction(func):
        raise ClientDefinitionError(f"Client method '{name}' must be declared 'async def'")

    try:
        hints = get_type_hints(func, include_extras=True)
    except Exception as e:
        raise ClientDefinitionError(f"Cannot resolve annotations of '{name}': {e}") from e

    subject_param = headers_param = body_param = None
    body_type: Any = None
    params = list(inspect.signature(func).parameters.values())[1:]  # skip self
    for param in params:
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            raise ClientDefinitionError(f"Client method '{name}' cannot take *args or **kwargs")
        annotation = hints.get(param.name)
        marker = _marker(annotation)
        if marker is Subject:
            subject_param = param.name
        elif marker is Headers:
            headers_param = param.name
        elif body_param is None:
            body_param = param.name
            body_type = annotation
        else:
            raise ClientDefinitionError(
                f"Client method '{name}' has more than one body parameter: "
                f"'{body_param}' and '{param.name}'"
            )

    fixed_subject = getattr(func, SUBJECT_ATTR, None)
    if fixed_subject is None and subject_param is None:
        raise ClientDefinitionError(
            f"Client method '{name}' needs @subject(...) or an Annotated[str, Subject] parameter"
        )

    reply_type = hints.get("return")
    expects_reply = "return" in hints and reply_type is not type(None)
    if reply_type is ReceivedMessage:
        # raw reply, no decoding
        reply_type = None

    return MethodBinding(
        name=name,
        subject=fixed_subject,
        subject_param=subject_param,
        headers_param=headers_param,
        body_param=body_param,
        body_type=body_type,
        reply_type=reply_type if expects_reply else None,
        expects_reply=expects_reply,
    )


class ClientBuilder:
    """
    Builds concrete clients for ``@nats_client`` interfaces.

    Every public function of the interface becomes a message method; names
    starting with an underscore are left alone. Definitions are validated
    when the client is built, not when it is first called.
    """

    def __init__(
        self,
        registry: SerDesRegistry,
        connections: ConnectionManager,
        request_timeout: Optional[float] = None,
    ):
        self.registry = registry
        self.connections = connections
        if request_timeout is None:
            request_timeout = connections.settings.request_timeout
        self.request_timeout = request_timeout
        self.logger = get_logger()

    def bindings(self, interface: type) -> List[MethodBinding]:
        """Describe and validate every message method of an interface."""
        if client_options(interface) is None:
            raise ClientDefinitionError(f"{interface.__name__} is not marked with @nats_client")

        result = []
        for name, func in inspect.getmembers(interface, inspect.isfunction):
            if name.startswith("_"):
                continue
            binding = bind_method(name, func)
            # Fail at build time when no serdes can carry the declared types
            if binding.body_param is not None and binding.body_type is not None:
                self.registry.serdes_for(binding.body_type)
            if binding.expects_reply and binding.reply_type is not None:
                self.registry.serdes_for(binding.reply_type)
            result.append(binding)
        return result

    def build(self, interface: type) -> Any:
        """Build a client instance implementing ``interface``."""
        options = client_options(interface)
        bindings = self.bindings(interface)
        transport = self.connections.get(options.connection)
        dispatcher = Dispatcher(self.registry, transport, self.request_timeout)

        namespace: Dict[str, Any] = {
            "__module__": interface.__module__,
            "__doc__": interface.__doc__,
            "_dispatcher": dispatcher,
        }
        for binding in bindings:
            namespace[binding.name] = _make_method(binding, getattr(interface, binding.name))

        impl = type(f"{interface.__name__}Impl", (interface,), namespace)
        self.logger.info(
            f"NATS client built: {interface.__name__} "
            f"({len(bindings)} methods, connection '{options.connection or 'default'}')"
        )
        return impl()


class Dispatcher:
    """Encodes bodies, sends them and decodes replies for a built client."""

    def __init__(self, registry: SerDesRegistry, transport: Any, request_timeout: float):
        self.registry = registry
        self.transport = transport
        self.request_timeout = request_timeout

    def message(self, binding: MethodBinding, arguments: Dict[str, Any]) -> OutgoingMessage:
        target, body, headers = binding.resolve(arguments)
        body_type = binding.body_type
        if body_type is None and body is not None:
            body_type = type(body)
        data = self.registry.encode(body, body_type)
        return OutgoingMessage(
            subject=target,
            payload=Payload(data=data, target_type=body_type),
            headers=dict(headers) if headers else None,
        )

    async def dispatch(self, binding: MethodBinding, arguments: Dict[str, Any]) -> Any:
        message = self.message(binding, arguments)
        if not binding.expects_reply:
            await self.transport.publish(message.subject, message.payload.data, headers=message.headers)
            return None

        reply = await self.transport.request(
            message.subject,
            message.payload.data,
            timeout=self.request_timeout,
            headers=message.headers,
        )
        if binding.reply_type is None:
            return reply
        return self.registry.decode_message(reply, binding.reply_type)


def _make_method(binding: MethodBinding, declared: Callable[..., Any]) -> Callable[..., Any]:
    signature = inspect.signature(declared)

    async def method(self, *args: Any, **kwargs: Any) -> Any:
        bound = signature.bind(self, *args, **kwargs)
        bound.apply_defaults()
        return await self._dispatcher.dispatch(binding, bound.arguments)

    method.__name__ = declared.__name__
    method.__qualname__ = declared.__qualname__
    method.__doc__ = declared.__doc__
    method.__signature__ = signature
    return method
