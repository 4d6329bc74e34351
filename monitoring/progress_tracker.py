from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeRemainingColumn

from ingestion.models import ProgressEvent


class ProgressTracker:
    def __init__(self, console):
        self.console = console

    def create_progress(self):
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeRemainingColumn(),
            console=self.console
        )

    def callback(self, progress: Progress, task_id):
        """Build a pipeline progress callback that drives one rich task."""
        def on_progress(event: ProgressEvent):
            description = event.message
            if event.current_page is not None and event.total_pages:
                description = f"{event.message} [dim]({event.current_page}/{event.total_pages})[/dim]"
            progress.update(task_id, description=description, completed=event.progress)

        return on_progress
