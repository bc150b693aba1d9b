import logging
from types import TracebackType
from typing import TypeVar

from ..domain import Command
from ..settings import JumboSettings
from .commands import CommandBus, CommandHandler, CommandToHandlerMap, DelegateToHandler
from .events import (
    CatchupStrategy,
    EventBus,
    EventProcessor,
    EventStore,
    InMemoryEventStore,
    NoCatchup,
    SynchronousEventBus,
)
from .middleware import Middleware

T = TypeVar("T")

LOGGER = logging.getLogger(__name__)


class Application:
    """Process-scoped wiring of the event store, event bus and command bus.

    One Application is built per process. Its event processors are caught
    up on `startup`, after which commands can be dispatched:

        >>> async with build_application(settings) as app:
        ...     goal_id = await app.dispatch(AddGoalCommand(...))
    """

    def __init__(
        self,
        settings: JumboSettings,
        event_store: EventStore,
        event_bus: EventBus,
        command_bus: CommandBus,
        processors: list[tuple[EventProcessor, CatchupStrategy]],
    ):
        self.settings = settings
        self.event_store = event_store
        self.event_bus = event_bus
        self.command_bus = command_bus
        self.processors = processors
        self.started = False

    async def dispatch(self, command: Command[T]) -> T:
        """Dispatch a command to the application.

        The command passes through the middleware chain to the handler
        registered for its type.

        Args:
            command: The command to dispatch.

        Returns:
            The handler's result, e.g. the new goal id for AddGoalCommand.
        """
        return await self.command_bus.dispatch(command)

    async def startup(self) -> None:
        """Startup the application.

        Runs the catchup strategy of every registered event processor, in
        registration order, so read models reflect the durable log before
        the first command is handled. Calling it again has no effect.
        """
        if self.started:
            return
        for processor, strategy in self.processors:
            await strategy.catchup(processor)
        self.started = True
        LOGGER.debug("Application started", extra={"processors": len(self.processors)})

    async def shutdown(self) -> None:
        self.started = False

    async def __aenter__(self) -> "Application":
        await self.startup()
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_value: BaseException | None,
        _traceback: TracebackType | None,
    ) -> None:
        await self.shutdown()


class ApplicationBuilder:
    """Builder for creating Application instances.

    Defaults to an InMemoryEventStore, a SynchronousEventBus and default
    settings; each can be replaced before `build`.

    Examples:
        >>> store = InMemoryEventStore()
        >>> bus = SynchronousEventBus()
        >>> app = (
        ...     ApplicationBuilder()
        ...     .use_event_store(store)
        ...     .use_event_bus(bus)
        ...     .register_middleware(ContextPropagationMiddleware())
        ...     .register_command_handler(AddGoalCommandHandler(store, bus))
        ...     .build()
        ... )
    """

    def __init__(self) -> None:
        self.settings: JumboSettings | None = None
        self.event_store: EventStore = InMemoryEventStore()
        self.event_bus: EventBus = SynchronousEventBus()
        self.middleware: list[Middleware] = []
        self.processors: list[tuple[EventProcessor, CatchupStrategy]] = []
        self.command_handlers: list[CommandHandler] = []

    def use_settings(self, settings: JumboSettings) -> "ApplicationBuilder":
        self.settings = settings
        return self

    def use_event_store(self, event_store: EventStore) -> "ApplicationBuilder":
        self.event_store = event_store
        return self

    def use_event_bus(self, event_bus: EventBus) -> "ApplicationBuilder":
        self.event_bus = event_bus
        return self

    def register_middleware(self, middleware: Middleware) -> "ApplicationBuilder":
        """Append middleware to the command chain.

        Middleware runs in registration order, so register
        ContextPropagationMiddleware before anything that reads the context.
        """
        self.middleware.append(middleware)
        return self

    def register_event_processor(
        self,
        processor: EventProcessor,
        catchup_strategy: CatchupStrategy | None = None,
    ) -> "ApplicationBuilder":
        """Subscribe a processor to the event bus at build time.

        Args:
            processor: The event processor to register.
            catchup_strategy: How to bring the processor up to date on
                startup. Defaults to NoCatchup.
        """
        self.processors.append((processor, catchup_strategy or NoCatchup()))
        return self

    def register_command_handler(self, handler: CommandHandler) -> "ApplicationBuilder":
        self.command_handlers.append(handler)
        return self

    def build(self) -> Application:
        """Build the application.

        Raises:
            ConfigurationError: If two handlers handle the same command type.
        """
        for processor, _ in self.processors:
            self.event_bus.subscribe_processor(processor)

        command_bus = CommandBus(
            DelegateToHandler(CommandToHandlerMap.from_handlers(self.command_handlers)),
            self.middleware,
        )
        return Application(
            settings=self.settings or JumboSettings(),
            event_store=self.event_store,
            event_bus=self.event_bus,
            command_bus=command_bus,
            processors=list(self.processors),
        )
