"""Infrastructure modules for the war alert relay.

Centralized infrastructure components:
- configuration: Settings management (Settings, WarAlertSettings)
- logging: Structured logging (get_module_logger, bind_event_context)
- notifications: Chat delivery models, renderers and the fan-out dispatcher
- operations: Operation results and error classification
- resilience: Reconnect/backoff state machine
- services: Application context and dependency injection (get_settings)

Subpackages are imported explicitly; this package has no import side effects.
"""
