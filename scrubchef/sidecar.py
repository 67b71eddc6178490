"""Private HTML mapping file that pairs redaction tokens with original values.

The sidecar is meant to stay inside the trust boundary, next to but separate
from the redacted output. Every value is HTML-escaped and appears only
in its table row; the search box filters the rendered rows.
"""

from __future__ import annotations

import datetime as _dt
from html import escape

_STYLE = """
body { font-family: system-ui, sans-serif; background: #0f172a; color: #f1f5f9; margin: 0; }
.banner { background: #ef4444; color: white; text-align: center; padding: 1rem;
          font-weight: bold; text-transform: uppercase; }
.container { max-width: 1400px; margin: 0 auto; padding: 2rem; }
.meta { display: flex; gap: 2rem; margin-bottom: 2rem; }
.meta label { display: block; color: #94a3b8; font-size: 0.875rem; }
table { width: 100%; border-collapse: collapse; font-size: 0.875rem; }
th, td { padding: 0.75rem 1rem; text-align: left; border-bottom: 1px solid #334155; }
.token { font-family: monospace; color: #38bdf8; font-weight: bold; }
.context { font-family: monospace; white-space: pre-wrap; word-break: break-all; }
.original { font-family: monospace; filter: blur(4px); cursor: pointer; }
.original:hover, .original.revealed { filter: none; }
.search-box { width: 100%; padding: 1rem; margin-bottom: 2rem; box-sizing: border-box; }
"""

_SCRIPT = """
function filterTable(query) {
    const q = query.toLowerCase();
    document.querySelectorAll('#table-body tr').forEach(row => {
        row.style.display = row.innerText.toLowerCase().includes(q) ? '' : 'none';
    });
}
"""


def total_redactions(canonical_map: dict) -> int:
    return sum(entry.get("occurrences", 0) for entry in canonical_map.get("canonical", {}).values())


def _row(entry: dict) -> str:
    contexts = entry.get("contexts") or [""]
    return (
        "<tr>"
        f'<td class="token">{escape(str(entry.get("id", "")))}</td>'
        f'<td>{escape(str(entry.get("type", "")))}</td>'
        f'<td class="context">{escape(contexts[0])}</td>'
        '<td><span class="original" onclick="this.classList.toggle(\'revealed\')">'
        f'{escape(str(entry.get("original", "")))}</span></td>'
        f'<td>{int(entry.get("occurrences", 0))}</td>'
        "</tr>"
    )


def generate_mapping_sidecar(
    canonical_map: dict,
    file_name: str,
    generated_at: _dt.datetime | None = None,
) -> str:
    """Render ``canonical_map`` (as returned by ``Engine.canonical_map``) as HTML."""
    generated_at = generated_at or _dt.datetime.now(_dt.timezone.utc)
    rows = "\n".join(_row(entry) for entry in canonical_map.get("canonical", {}).values())
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>ScrubChef Mapping - {escape(file_name)}</title>
<style>{_STYLE}</style>
</head>
<body>
<div class="banner">Private mapping file - do not share externally</div>
<div class="container">
<h1>Redaction Mapping Sidecar</h1>
<div class="meta">
<div><label>Source File</label><div>{escape(file_name)}</div></div>
<div><label>Generated At</label><div>{escape(generated_at.isoformat())}</div></div>
<div><label>Total Redactions</label><div>{total_redactions(canonical_map)}</div></div>
</div>
<input type="text" class="search-box" placeholder="Search tokens or original values..."
       onkeyup="filterTable(this.value)">
<table>
<thead><tr><th>Token ID</th><th>Type</th><th>Context</th><th>Original Value</th><th>Count</th></tr></thead>
<tbody id="table-body">
{rows}
</tbody>
</table>
</div>
<script>
{_SCRIPT}
</script>
</body>
</html>
"""
