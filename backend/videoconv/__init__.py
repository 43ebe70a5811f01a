"""Video converter hooks for the Mattermost upload pipeline.

This package converts uploaded QuickTime (``.mov``) videos to MP4 before they
are stored, and posts a preview reply for video attachments once a message has
been created.

Modules:
    - config: YAML settings and the hot-reloadable plugin configuration
    - workspace: scratch files scoped to a single hook invocation
    - transcoder: ffmpeg command profiles and process invocation
    - hooks: the pre-commit upload hook and the post-commit preview hook
    - platform: Mattermost data model and API client
    - plugin: facade binding the hooks to their collaborators
"""

__version__ = "0.1.0"
