# =============================================================================
# Dependencies — ProviderClients Injection
# =============================================================================
#
# create_app() stores one ProviderClients on app.state. Handlers ask for it
# via Depends(get_clients) and never touch module-level client globals.
#
# Tests either build the app with fakes:
#   create_app(settings, clients=ProviderClients(settings, embedder=..., ...))
# or override the dependency:
#   app.dependency_overrides[get_clients] = lambda: fake_clients
# =============================================================================

from fastapi import Request

from ragbridge.services.clients import ProviderClients


def get_clients(request: Request) -> ProviderClients:
    """Return the application's shared ProviderClients holder."""
    return request.app.state.clients
