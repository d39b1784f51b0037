"""
HTML rendering for the watchlist page.
"""
from html import escape
from typing import List

from services.web_viewer.toggle_control import ToggleControl
from services.web_viewer.watchlist_table import (
    WatchlistTable, COLUMNS, EMPTY_TITLE, EMPTY_DESCRIPTION, EMPTY_ACTION
)

PAGE_TITLE = "My Watchlist"
PAGE_DESCRIPTION = "Keep track of your favorite stocks and monitor their performance in one place."

STAR_PATH = (
    "M11.48 3.499a.562.562 0 011.04 0l2.125 5.111a.563.563 0 00.475.345l5.518.442"
    "c.499.04.701.663.321.988l-4.204 3.602a.563.563 0 00-.182.557l1.285 5.385"
    "a.562.562 0 01-.84.61l-4.725-2.885a.563.563 0 00-.586 0L6.982 20.54"
    "a.562.562 0 01-.84-.61l1.285-5.385a.563.563 0 00-.182-.557L3.04 10.385"
    "a.563.563 0 01.321-.988l5.518-.442a.563.563 0 00.475-.345l2.125-5.111z"
)

# Mirrors ToggleControl/WatchlistTable in the browser
TOGGLE_SCRIPT = """
<script>
(function () {
  var table = document.querySelector('.watchlist-table');
  if (!table) return;
  var restore = table.dataset.policy === 'restore_on_failure';
  var notices = document.querySelector('.watchlist-notices');

  function notify(message) {
    if (!notices) return;
    var item = document.createElement('p');
    item.textContent = message;
    notices.appendChild(item);
    setTimeout(function () { item.remove(); }, 5000);
  }

  table.querySelectorAll('tr[data-href]').forEach(function (row) {
    row.addEventListener('click', function () {
      window.location.assign(row.dataset.href);
    });
  });

  table.querySelectorAll('.watchlist-icon-btn').forEach(function (button) {
    button.addEventListener('click', async function (event) {
      event.preventDefault();
      event.stopPropagation();
      if (button.dataset.loading === 'true') return;
      if (!table.dataset.email) return;

      var row = button.closest('tr');
      var body = row.parentNode;
      var next = row.nextSibling;
      var previous = button.dataset.added === 'true';

      button.dataset.loading = 'true';
      button.disabled = true;
      button.dataset.added = String(!previous);
      if (previous) row.remove();

      var result = {success: false, error: 'Request failed'};
      try {
        var response = await fetch('/api/watchlist/toggle', {
          method: 'POST',
          credentials: 'same-origin',
          headers: {'Content-Type': 'application/json'},
          body: JSON.stringify({symbol: button.dataset.symbol, company: button.dataset.company})
        });
        if (response.ok) result = await response.json();
      } catch (err) {
        result = {success: false, error: String(err)};
      }

      button.dataset.loading = 'false';
      button.disabled = false;
      if (!result.success) {
        button.dataset.added = String(previous);
        notify('Could not update ' + button.dataset.symbol + '. Please try again.');
        if (previous && restore) body.insertBefore(row, next);
      }
    });
  });
})();
</script>
"""


def render_control(control: ToggleControl) -> str:
    """Icon toggle button for a table row."""
    added = "true" if control.is_member else "false"
    classes = ["watchlist-icon-btn"]
    if control.is_member:
        classes.append("watchlist-icon-added")
    if control.in_flight:
        classes.append("opacity-50 cursor-not-allowed")
    fill = "#FACC15" if control.is_member else "none"
    stroke = "#FACC15" if control.is_member else "currentColor"
    disabled = " disabled" if control.in_flight else ""

    return (
        f'<button class="{" ".join(classes)}" title="{escape(control.title)}" '
        f'aria-label="{escape(control.title)}" data-symbol="{escape(control.symbol)}" '
        f'data-company="{escape(control.company)}" data-added="{added}"{disabled}>'
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" fill="{fill}" '
        f'stroke="{stroke}" stroke-width="1.5" class="watchlist-star" width="24" height="24">'
        f'<path stroke-linecap="round" stroke-linejoin="round" d="{STAR_PATH}"/></svg>'
        f'</button>'
    )


def render_empty_state() -> str:
    return (
        '<div class="watchlist-empty-container"><div class="watchlist-empty">'
        f'<h3 class="empty-title">{EMPTY_TITLE}</h3>'
        f'<p class="empty-description">{EMPTY_DESCRIPTION}</p>'
        f'<a href="/"><button class="search-btn">{EMPTY_ACTION}</button></a>'
        '</div></div>'
    )


def render_table(table: WatchlistTable) -> str:
    """Watchlist table, or the empty state when there are no rows."""
    if table.is_empty:
        return render_empty_state()

    header = "".join(f'<th class="table-header">{column}</th>' for column in COLUMNS)
    body: List[str] = []
    for row in table.display_rows():
        body.append(
            f'<tr class="table-row" data-href="{escape(row["href"])}">'
            f'<td class="table-cell symbol">{escape(row["symbol"])}</td>'
            f'<td class="table-cell company">{escape(row["company"])}</td>'
            f'<td class="table-cell price">{escape(row["price"])}</td>'
            f'<td class="table-cell change {row["direction"]}">{escape(row["change"])}</td>'
            f'<td class="table-cell action">{render_control(row["control"])}</td>'
            '</tr>'
        )

    return (
        f'<div class="watchlist-table" data-policy="{table.policy.value}" '
        f'data-email="{escape(table.email or "")}">'
        f'<table><thead><tr class="table-header-row">{header}</tr></thead>'
        f'<tbody>{"".join(body)}</tbody></table></div>'
    )


def render_page(table: WatchlistTable, app_name: str) -> str:
    """Full watchlist page."""
    return (
        '<!DOCTYPE html><html lang="en"><head><meta charset="utf-8">'
        f'<title>{PAGE_TITLE} | {escape(app_name)}</title>'
        '<meta name="description" content="Track your favorite stocks.">'
        '<link rel="stylesheet" href="/static/watchlist.css">'
        '</head><body><div class="watchlist-container"><div class="watchlist">'
        f'<h1 class="watchlist-title">{PAGE_TITLE}</h1>'
        f'<p class="watchlist-description">{PAGE_DESCRIPTION}</p>'
        '<div class="watchlist-notices" role="status"></div>'
        f'{render_table(table)}'
        '</div></div>'
        f'{TOGGLE_SCRIPT}'
        '</body></html>'
    )
