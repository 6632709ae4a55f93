import logging

import dash
from dash import dcc, html, Input, Output, State
import dash_bootstrap_components as dbc
from datetime import datetime

# Data access + chart builders
import dash_wrappers as dw
from config import configure_logging

# Pages
from pages import overview, quarterly

configure_logging()
logger = logging.getLogger(__name__)

# App
app = dash.Dash(
    __name__,
    external_stylesheets=[dbc.themes.CYBORG],
    suppress_callback_exceptions=True,
    title="Investor Dashboard"
)
server = app.server

DEFAULT_SOURCE = dw.default_source()

# Warm the cache for the default dataset
if DEFAULT_SOURCE:
    dw.get_data(DEFAULT_SOURCE)
    logger.info("Initial data load complete for %s", DEFAULT_SOURCE)
else:
    logger.warning("No datasets available; dashboard will start empty")

# Sidebar with navigation and dataset controls
sidebar = html.Div(
    [
        html.H3("INVESTOR", className="display-6"),
        html.P("Quarterly Returns", className="lead"),
        html.Hr(),

        dbc.Nav(
            [
                dbc.NavLink("Overview", href="/", active="exact"),
                dbc.NavLink("Quarterly Ledger", href="/quarterly", active="exact"),
            ],
            vertical=True,
            pills=True,
        ),

        html.Hr(),

        # Controls
        html.Div([
            dbc.Label("Theme"),
            dbc.Switch(id="theme-switch", label="Dark Mode", value=True, className="mb-2"),

            dbc.Label("Dataset"),
            dcc.Dropdown(
                id="dataset-dropdown",
                options=dw.dataset_options(),
                value=DEFAULT_SOURCE,
                clearable=False,
                className="mb-2 text-dark"
            ),

            html.Hr(),
            dbc.Button("Reload Data", id="btn-reload", color="secondary", className="w-100"),
        ]),
    ],
    id="sidebar",
    className="sidebar",
)

# Routed page body
content = html.Div(id="page-content", className="content")

# Main Layout
app.layout = html.Div(
    [
        dcc.Location(id="url"),

        # Shared state read by every page
        dcc.Store(id="data-signal", data=datetime.now().isoformat()),
        dcc.Store(id="theme-store", data="dark"),
        dcc.Store(id="dataset-store", data=DEFAULT_SOURCE),

        sidebar,
        content,
    ],
    id="main-container",
    **{"data-theme": "dark"}
)

# Page callbacks target ids that only exist once a page is routed in
app.validation_layout = html.Div([
    app.layout,
    overview.layout,
    quarterly.layout,
])

# ============================================================
# CALLBACKS
# ============================================================

# 1. Router
@app.callback(Output("page-content", "children"), [Input("url", "pathname")])
def render_page_content(pathname):
    if pathname == "/":
        return overview.layout
    elif pathname == "/quarterly":
        return quarterly.layout
    return dbc.Container(
        [
            html.H1("404: Not found", className="text-danger"),
            html.Hr(),
            html.P(f"No page at {pathname}. Try Overview or Quarterly Ledger."),
        ],
        className="py-3"
    )

# 2. Theme, dataset selection and reload
@app.callback(
    [Output("theme-store", "data"),
     Output("main-container", "data-theme"),
     Output("dataset-store", "data"),
     Output("data-signal", "data")],
    [Input("theme-switch", "value"),
     Input("dataset-dropdown", "value"),
     Input("btn-reload", "n_clicks")],
    [State("dataset-store", "data")]
)
def update_global_state(is_dark, source, reload_clicks, current_source):
    # Reload re-reads the file / endpoint for the selected dataset
    if dash.callback_context.triggered_id == "btn-reload" and source:
        dw.refresh_data(source)

    theme = "dark" if is_dark else "light"
    return theme, theme, source or current_source, datetime.now().isoformat()

if __name__ == "__main__":
    app.run(debug=True)
