"""
Model package.

IMPORTANT (Alembic / SQLModel):
- Alembic autogenerate relies on `SQLModel.metadata`, which is populated only
  when the table models are imported.
- `wphub/alembic/env.py` imports `wphub.models`, so this module must import
  all SQLModel `table=True` models to register them.
"""

# Import table models so SQLModel registers them in metadata.
from wphub.activity.models import ActivityLog  # noqa: F401
from wphub.messaging.models import Message, Notification  # noqa: F401
from wphub.plugin.models import Plugin  # noqa: F401
from wphub.project.models import Project, ProjectTemplate  # noqa: F401
from wphub.site.models import Site  # noqa: F401
from wphub.team.models import Team, TeamInvite  # noqa: F401
from wphub.user.models import User  # noqa: F401
