"""
App-wide constants for route configuration and template lookup.

Single source of truth for route prefixes, tags, common response
definitions and the Jinja2 environments used for outgoing email.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape


@dataclass(frozen=True)
class RouteConfig:
    """Configuration for a route group."""

    prefix: str
    tag: str


class Routes:
    """Route configurations for all API endpoints."""

    AUTH = RouteConfig(prefix="/auth", tag="auth")
    USER = RouteConfig(prefix="/users", tag="users")
    HEALTH = RouteConfig(prefix="/health", tag="health")
    TEAM = RouteConfig(prefix="/teams", tag="teams")
    SITE = RouteConfig(prefix="/sites", tag="sites")
    PLUGIN = RouteConfig(prefix="/plugins", tag="plugins")
    PLATFORM_TOOLS = RouteConfig(prefix="/platform-tools", tag="platform-tools")
    MESSAGE = RouteConfig(prefix="/messages", tag="messages")
    NOTIFICATION = RouteConfig(prefix="/notifications", tag="notifications")
    ACTIVITY = RouteConfig(prefix="/activity", tag="activity")
    PROJECT = RouteConfig(prefix="/projects", tag="projects")


class CommonResponses:
    """Standard HTTP error response definitions for OpenAPI documentation."""

    UNAUTHORIZED: dict[int, dict[str, Any]] = {
        401: {"description": "Not authenticated or invalid credentials"}
    }
    FORBIDDEN: dict[int, dict[str, Any]] = {
        403: {"description": "User is inactive or lacks permissions"}
    }
    NOT_FOUND: dict[int, dict[str, Any]] = {404: {"description": "Resource not found"}}
    CONFLICT: dict[int, dict[str, Any]] = {
        409: {"description": "Resource already exists or is in the wrong state"}
    }
    BAD_REQUEST: dict[int, dict[str, Any]] = {
        400: {"description": "Invalid request data"}
    }
    BAD_GATEWAY: dict[int, dict[str, Any]] = {
        502: {"description": "Managed site or upstream API failed"}
    }


# Source and compiled email templates
EmailTemplatesDir = Path(__file__).parent.parent / "templates" / "emails"
CompiledEmailTemplatesDir = EmailTemplatesDir / "compiled"

# Jinja2 environment for compiled templates (used at runtime)
JinjaCompiledEmailTemplatesEnv = Environment(
    loader=FileSystemLoader(str(CompiledEmailTemplatesDir)),
    autoescape=select_autoescape(["html", "xml"]),
)
