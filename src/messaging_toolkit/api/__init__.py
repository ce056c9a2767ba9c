from messaging_toolkit.api.app import build_controller, create_app, create_app_from_settings

__all__ = [
    "build_controller",
    "create_app",
    "create_app_from_settings",
]
