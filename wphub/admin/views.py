from sqladmin import ModelView

from wphub.activity.models import ActivityLog
from wphub.messaging.models import Message
from wphub.plugin.models import Plugin
from wphub.site.models import Site
from wphub.team.models import Team, TeamInvite
from wphub.user.models import User


class UserAdmin(ModelView, model=User):
    name = "User"
    name_plural = "Users"
    icon = "fa-solid fa-user"

    column_list = [
        User.email,
        User.full_name,
        User.role,
        User.status,
        User.company,
        User.id,
        User.external_id,
        User.created_at,
    ]

    column_searchable_list = [
        User.email,
        User.full_name,
        User.company,
        User.external_id,
    ]

    column_sortable_list = [getattr(User, field) for field in User.model_fields]


class TeamAdmin(ModelView, model=Team):
    name = "Team"
    name_plural = "Teams"
    icon = "fa-solid fa-users"

    column_list = [
        Team.name,
        Team.owner_id,
        Team.is_blocked,
        Team.id,
        Team.created_at,
    ]
    column_searchable_list = [Team.name]
    column_sortable_list = [Team.name, Team.is_blocked, Team.created_at]


class TeamInviteAdmin(ModelView, model=TeamInvite):
    name = "Team invite"
    name_plural = "Team invites"
    icon = "fa-solid fa-envelope-open"

    column_list = [
        TeamInvite.invited_email,
        TeamInvite.team_id,
        TeamInvite.team_role_id,
        TeamInvite.status,
        TeamInvite.created_at,
    ]
    column_searchable_list = [TeamInvite.invited_email]
    column_sortable_list = [TeamInvite.status, TeamInvite.created_at]


class SiteAdmin(ModelView, model=Site):
    name = "Site"
    name_plural = "Sites"
    icon = "fa-solid fa-globe"

    column_list = [
        Site.name,
        Site.url,
        Site.owner_type,
        Site.owner_id,
        Site.connection_status,
        Site.wp_version,
        Site.connection_checked_at,
    ]
    column_details_exclude_list = [Site.api_key]
    form_excluded_columns = [Site.api_key]
    column_searchable_list = [Site.name, Site.url]
    column_sortable_list = [Site.name, Site.connection_status, Site.created_at]


class PluginAdmin(ModelView, model=Plugin):
    name = "Plugin"
    name_plural = "Plugins"
    icon = "fa-solid fa-puzzle-piece"

    column_list = [
        Plugin.name,
        Plugin.slug,
        Plugin.source,
        Plugin.latest_version,
        Plugin.owner_type,
        Plugin.owner_id,
        Plugin.updated_at,
    ]
    column_searchable_list = [Plugin.name, Plugin.slug]
    column_sortable_list = [Plugin.name, Plugin.slug, Plugin.updated_at]


class MessageAdmin(ModelView, model=Message):
    name = "Message"
    name_plural = "Messages"
    icon = "fa-solid fa-comments"
    can_create = False

    column_list = [
        Message.subject,
        Message.sender_email,
        Message.recipient_type,
        Message.priority,
        Message.is_read,
        Message.created_at,
    ]
    column_searchable_list = [Message.subject, Message.sender_email]
    column_sortable_list = [Message.created_at, Message.priority]


class ActivityLogAdmin(ModelView, model=ActivityLog):
    name = "Activity"
    name_plural = "Activity log"
    icon = "fa-solid fa-clock-rotate-left"
    can_create = False
    can_edit = False
    can_delete = False

    column_list = [
        ActivityLog.created_at,
        ActivityLog.user_email,
        ActivityLog.action,
        ActivityLog.entity_type,
        ActivityLog.entity_id,
    ]
    column_searchable_list = [ActivityLog.user_email, ActivityLog.action]
    column_sortable_list = [ActivityLog.created_at, ActivityLog.entity_type]
    column_default_sort = [(ActivityLog.created_at, True)]


ADMIN_VIEWS = [
    UserAdmin,
    TeamAdmin,
    TeamInviteAdmin,
    SiteAdmin,
    PluginAdmin,
    MessageAdmin,
    ActivityLogAdmin,
]
