"""Pure domain layer: clock abstraction and request DTOs."""
