"""
Configuration centralisée pour l'API AdaptIQ
Utilise pydantic-settings pour la gestion des variables d'environnement
"""
from pydantic_settings import BaseSettings
from pydantic import Field, model_validator
from typing import List


class Settings(BaseSettings):
    """Configuration de l'application"""

    # Database
    DATABASE_URL: str = Field(
        default="sqlite:///./adaptiq.db",
        description="URL de la base de données distante (PostgreSQL en production)"
    )

    # Redis (fan-out temps reel)
    REDIS_URL: str = Field(
        default="redis://localhost:6379",
        description="URL de connexion Redis (pub/sub des ajustements)"
    )
    BROADCAST_BACKEND: str = Field(
        default="redis",
        description="Backend de diffusion des ajustements : 'redis' ou 'memory' (mono-process)"
    )

    # File d'attente hors-ligne (cote appareil)
    OFFLINE_BUFFER_PATH: str = Field(
        default="adaptiq_offline.db",
        description="Chemin du fichier SQLite local pour les series en attente"
    )
    REMOTE_API_URL: str = Field(
        default="http://localhost:8000",
        description="URL de l'API distante vers laquelle la file est videe"
    )
    REMOTE_WRITE_TIMEOUT_S: float = Field(
        default=10.0,
        description="Timeout par requete d'ecriture distante (secondes)"
    )
    SYNC_INTERVAL_S: float = Field(
        default=60.0,
        description="Intervalle entre deux tentatives de synchronisation (secondes)"
    )

    # URLs de l'application
    FRONTEND_URL: str = Field(
        default="http://localhost:3000",
        description="URL du frontend (utilisée pour CORS)"
    )

    # CORS
    ALLOWED_ORIGINS: List[str] = Field(
        default=[],
        description="Origines autorisées pour CORS (configuré automatiquement selon ENVIRONMENT si vide)"
    )

    # Monitoring (Sentry)
    SENTRY_DSN: str = Field(
        default="",
        description="DSN Sentry pour le error tracking (vide = Sentry desactive)"
    )

    # Application
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: str = Field(
        default="",
        description="Niveau de logging (auto-configuré selon ENVIRONMENT si vide)"
    )

    @model_validator(mode="after")
    def _configure_environment(self) -> "Settings":
        """Configure DEBUG et LOG_LEVEL selon ENVIRONMENT."""
        is_prod = self.ENVIRONMENT == "production"
        # En production, forcer DEBUG=False
        if is_prod:
            self.DEBUG = False
        if not self.LOG_LEVEL:
            self.LOG_LEVEL = "WARNING" if is_prod else "INFO"
        self.BROADCAST_BACKEND = self.BROADCAST_BACKEND.lower()
        if self.BROADCAST_BACKEND not in ("redis", "memory"):
            raise ValueError(f"BROADCAST_BACKEND invalide: {self.BROADCAST_BACKEND}")
        return self

    @model_validator(mode="after")
    def _set_default_origins(self) -> "Settings":
        """Définit les origines CORS par défaut selon ENVIRONMENT si non configurées."""
        if not self.ALLOWED_ORIGINS:
            if self.ENVIRONMENT == "production":
                self.ALLOWED_ORIGINS = []
            else:
                self.ALLOWED_ORIGINS = [
                    "http://localhost:3000",
                    "http://127.0.0.1:3000",
                ]
        # Toujours inclure FRONTEND_URL dans les origines autorisees
        frontend = self.FRONTEND_URL.rstrip("/")
        if frontend and frontend not in self.ALLOWED_ORIGINS:
            self.ALLOWED_ORIGINS.append(frontend)
        return self

    class Config:
        env_file = ".env"
        case_sensitive = True


def get_settings() -> Settings:
    """Récupère la configuration"""
    return Settings()
