"""Mattermost data model and the API surface the hooks consume."""
from .api import MattermostAPI, PluginAPI
from .schemas import FileInfo, Post

__all__ = ["FileInfo", "MattermostAPI", "PluginAPI", "Post"]
