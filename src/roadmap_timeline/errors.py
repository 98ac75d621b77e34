"""Domain errors for Roadmap Timeline. Routes map these to HTTP status codes."""


class TimelineError(Exception):
    """Base class for timeline errors."""


class EmptyTimelineError(TimelineError):
    """Raised when a range is requested for an entity set with no dated entities."""


class ViewNotFoundError(TimelineError):
    def __init__(self, view_id: str) -> None:
        super().__init__(f"View not found: {view_id}")
        self.view_id = view_id


class ProjectNotFoundError(TimelineError):
    def __init__(self, project_id: str) -> None:
        super().__init__(f"Project not found: {project_id}")
        self.project_id = project_id
