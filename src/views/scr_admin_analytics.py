from textual import on, work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.events import ScreenResume
from textual.widgets import Button, MarkdownViewer

from utils.pure import generate_markdown_table, money
from views.base_screen import BaseScreen


class AdminAnalyticsScreen(BaseScreen):
    """
    Per-vendor performance: products, units sold and revenue.
    """

    ROUTE = "/admin/analytics"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-stats", show_table_of_contents=False)
            yield Button("Refresh", id="btn-refresh", variant="primary")

    @on(Button.Pressed, "#btn-refresh")
    @on(ScreenResume)
    @work(exclusive=True)
    async def handle_reload(self) -> None:
        review = self.app.state.review
        result = await review.fetch_vendor_stats()
        if result.redirect:
            self.app.navigate(result.redirect)
            return
        if not result.ok:
            self.notify(result.message, severity="error")
            return

        stats = sorted(review.vendor_stats, key=lambda v: v.total_revenue, reverse=True)
        rows = [
            [
                v.shop_name or "-",
                v.vendor_name,
                v.total_products,
                v.total_sold,
                money(v.total_revenue),
            ]
            for v in stats
        ]
        total = sum(v.total_revenue for v in stats)
        md = (
            "### Vendor Performance\n\n"
            + generate_markdown_table(
                ["Shop", "Vendor", "Products", "Units Sold", "Revenue"],
                rows,
                ["l", "l", "r", "r", "r"],
            )
            + f"\n\n**Platform Revenue:** {money(total)}"
        )
        await self.query_one(MarkdownViewer).document.update(md)
