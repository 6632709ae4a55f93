import dash_bootstrap_components as dbc
from dash import html

def create_data_source_badge(source_summary):
    """
    Creates a badge indicating where the dataset came from and whether any
    records were dropped or reclassified.
    source_summary: {
        'source_type': 'File' | 'API',
        'source': str,
        'record_count': int,
        'used_count': int,
        'errors': list of str
    }
    """
    if not source_summary:
        return html.Div()

    source_type = source_summary.get('source_type', 'File')
    errors = source_summary.get('errors', [])
    record_count = source_summary.get('record_count', 0)
    used_count = source_summary.get('used_count', 0)

    if source_type == "API":
        label = "Live API"
        color = "success"
        header = "Transactions fetched from the equity endpoint."
    else:
        label = "Bundled File"
        color = "info"
        header = "Transactions loaded from a bundled dataset file."

    if record_count == 0:
        label = "No Data"
        color = "secondary"
        header = "The selected dataset contains no transactions."

    if errors:
        label = f"{label} · {len(errors)} Issues"
        color = "warning"

    tooltip_content = html.Div([
        html.P(header, className="mb-2 fw-bold"),
        html.P(f"• Source: {source_summary.get('source', '')}", className="mb-0"),
        html.P(f"• Records: {record_count} ({used_count} used)", className="mb-0"),
        html.Hr(className="my-2") if errors else None,
        html.P("Issues:", className="mb-1 small") if errors else None,
        html.Div([html.P(e, className="small mb-0") for e in errors[:10]]),
        html.P(f"(+{len(errors) - 10} more)", className="small mb-0") if len(errors) > 10 else None,
    ], style={"textAlign": "left", "padding": "5px"})

    badge = dbc.Badge(
        label,
        color=color,
        pill=True,
        id="data-source-badge",
        style={"cursor": "pointer", "fontSize": "0.8rem"}
    )

    return html.Div([
        badge,
        dbc.Tooltip(
            tooltip_content,
            target="data-source-badge",
            placement="bottom",
            className="source-tooltip"
        )
    ], style={"display": "inline-block", "marginLeft": "10px"})
