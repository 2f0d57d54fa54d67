"""
Exceptions métier de l'application.
Chaque erreur porte le code HTTP vers lequel elle est traduite par main.py.
"""

from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Erreur de base de l'application."""

    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """Données manquantes ou mal typées. `errors` détaille les champs fautifs."""

    status_code = 422

    def __init__(self, message: str = "Données invalides.", errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, exc) -> "ValidationError":
        """Construit l'erreur à partir d'une pydantic.ValidationError (liste des champs fautifs)."""
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        fields = ", ".join(err["field"] for err in errors)
        return cls(f"Некорректные данные: {fields}.", errors=errors)


class NotFoundError(AppError):
    status_code = 404


class UnauthenticatedError(AppError):
    status_code = 401

    def __init__(self, message: str = "Требуется авторизация."):
        super().__init__(message)


class ForbiddenError(AppError):
    status_code = 403

    def __init__(self, message: str = "Доступ запрещён."):
        super().__init__(message)


class ConflictError(AppError):
    status_code = 409


class UnsupportedMediaError(AppError):
    status_code = 415

    def __init__(self, message: str = "Разрешены только изображения (JPEG, PNG, GIF, WEBP)."):
        super().__init__(message)


class PayloadTooLargeError(AppError):
    status_code = 413


class StorageError(AppError):
    """Échec de persistance (base de données)."""

    status_code = 500

    def __init__(self, message: str = "Ошибка хранилища данных."):
        super().__init__(message)


class StorageUnavailableError(StorageError):
    """La base de données est injoignable ou désactivée."""

    status_code = 503

    def __init__(
        self,
        message: str = (
            "База данных временно недоступна. "
            "Проверьте, что сервер базы данных запущен и доступен (DATABASE_URL)."
        ),
    ):
        super().__init__(message)
