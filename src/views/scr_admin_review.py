from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume, ScreenSuspend
from textual.widgets import Button, DataTable, MarkdownViewer

from api.models import VendorApplication
from core.results import ActionResult
from utils.pure import generate_markdown_table, humanize_status, short_date
from views.base_screen import BaseScreen
from views.modal_dialog import confirm_with


class AdminReviewScreen(BaseScreen):
    """
    Vendor applications, pending ones on top.
    """

    ROUTE = "/admin"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-application", show_table_of_contents=False)
            yield DataTable(id="table-applications")
        with Horizontal(id="hort-table-control"):
            yield Button("Approve", id="btn-approve", variant="success")
            yield Button("Reject", id="btn-reject", variant="error")
            yield Button("Refresh", id="btn-refresh")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("ID", "Shop", "Applicant", "Submitted", "Status")

    @on(ScreenSuspend)
    def handle_suspend(self) -> None:
        self.app.state.review.detach()

    @on(ScreenResume)
    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True, group="review-load")
    async def handle_refresh(self) -> None:
        self._after(await self.app.state.review.fetch_applications())

    def _after(self, result: ActionResult) -> None:
        if result.redirect:
            self.app.navigate(result.redirect)
            return
        self._render_table()

    def _render_table(self) -> None:
        review = self.app.state.review
        table = self.query_one(DataTable)
        table.clear()
        for app in review.applications:
            table.add_row(
                app.id,
                app.shop_name,
                app.applicant_name or app.applicant_email or "-",
                short_date(app.created_at),
                humanize_status(app.status),
                key=str(app.id),
            )
        if review.applications:
            table.move_cursor(row=0)
        self._render_detail(self._selected())

    def _selected(self) -> Optional[VendorApplication]:
        table = self.query_one(DataTable)
        if table.row_count == 0:
            return None
        app_id = int(table.get_row_at(table.cursor_row)[0])
        return next(
            (a for a in self.app.state.review.applications if a.id == app_id), None
        )

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self) -> None:
        self._render_detail(self._selected())

    def _render_detail(self, app: Optional[VendorApplication]) -> None:
        viewer = self.query_one(MarkdownViewer)
        pending = len(self.app.state.review.pending())
        if app is None:
            viewer.document.update("### No vendor applications yet.")
            self.query_one("#btn-approve").disabled = True
            self.query_one("#btn-reject").disabled = True
            return

        rows = [
            ["Shop", app.shop_name],
            ["Applicant", app.applicant_name or "-"],
            ["Email", app.applicant_email or "-"],
            ["Submitted", short_date(app.created_at)],
            ["Status", humanize_status(app.status)],
        ]
        md = (
            f"### Application #{app.id}  ({pending} pending)\n\n"
            + generate_markdown_table(["", ""], rows, ["l", "l"])
            + f"\n\n{app.description}"
        )
        viewer.document.update(md)

        # decisions only make sense while the application is still open
        is_pending = app.status == "PENDING"
        self.query_one("#btn-approve").disabled = not is_pending
        self.query_one("#btn-reject").disabled = not is_pending

    @on(Button.Pressed, "#btn-approve")
    @work(exclusive=True, group="review")
    async def handle_approve(self) -> None:
        app = self._selected()
        if app is None:
            return
        result = await self.app.state.review.approve(
            app.id, confirm_with(self.app, tone="positive")
        )
        if result.ok:
            self.notify(f"{app.shop_name} approved.")
        self._after(result)

    @on(Button.Pressed, "#btn-reject")
    @work(exclusive=True, group="review")
    async def handle_reject(self) -> None:
        app = self._selected()
        if app is None:
            return
        result = await self.app.state.review.reject(
            app.id, confirm_with(self.app, tone="error")
        )
        if result.ok:
            self.notify(f"{app.shop_name} rejected.", severity="warning")
        self._after(result)
