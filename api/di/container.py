"""Centralized dependency injection container."""
from dependency_injector import containers, providers

from core.settings import SETTINGS
from infra.llm import LLMClient
from infra.resources import DatabaseResource


class InfrastructureContainer(containers.DeclarativeContainer):
    """Infrastructure layer dependencies."""

    # Database
    database = providers.Resource(
        DatabaseResource,
        database_url=str(SETTINGS.DATABASE.DATABASE_URL),
    )

    # Upstream model
    llm_client = providers.Singleton(
        LLMClient,
        model=SETTINGS.OPENAI.OPENAI_MODEL,
        api_key=SETTINGS.OPENAI.OPENAI_API_KEY.get_secret_value(),
        base_url=SETTINGS.OPENAI.OPENAI_BASE_URL,
        temperature=SETTINGS.OPENAI.OPENAI_TEMPERATURE,
        timeout_seconds=SETTINGS.OPENAI.OPENAI_TIMEOUT_SECONDS,
    )


class ServiceContainer(containers.DeclarativeContainer):
    """Application services - depends on infrastructure."""

    infrastructure = providers.DependenciesContainer()

    conversation_service = providers.Factory(
        "api.features.conversation.service.ConversationService",
        llm_client=infrastructure.llm_client,
        history_window_size=SETTINGS.CONVERSATION.HISTORY_WINDOW_SIZE,
        retry_attempts=SETTINGS.CONVERSATION.STORE_RETRY_ATTEMPTS,
        retry_base_delay=SETTINGS.CONVERSATION.STORE_RETRY_BASE_DELAY_SECONDS,
    )

    chat_service = providers.Factory(
        "api.features.chat.service.ChatService",
        llm_client=infrastructure.llm_client,
    )

    book_service = providers.Factory(
        "api.features.books.service.BookService",
        llm_client=infrastructure.llm_client,
    )


class ControllerContainer(containers.DeclarativeContainer):
    """Controller-specific dependencies."""

    services = providers.DependenciesContainer()

    conversation_controller = providers.Factory(
        "api.features.conversation.controller.ConversationController",
        conversation_service=services.conversation_service,
    )

    chat_controller = providers.Factory(
        "api.features.chat.controller.ChatController",
        chat_service=services.chat_service,
    )

    book_controller = providers.Factory(
        "api.features.books.controller.BookController",
        book_service=services.book_service,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Main application container composing all sub-containers."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "api.main",
            "api.shared.db",
            "api.features.conversation.router",
            "api.features.chat.router",
            "api.features.books.router",
        ]
    )

    infrastructure = providers.Container(InfrastructureContainer)
    services = providers.Container(ServiceContainer, infrastructure=infrastructure)
    controllers = providers.Container(ControllerContainer, services=services)
