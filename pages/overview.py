from dash import dcc, html, callback, Input, Output
import dash_bootstrap_components as dbc
import dash_wrappers as dw
from components.data_source_badge import create_data_source_badge

def create_stat_card(title, value, is_positive=None):
    """
    Stat card: big value, small label underneath. Optional green/red edge
    for values with a sign worth flagging.
    """
    if is_positive is None:
        edge = "#4C6A92"
    else:
        edge = "#28a745" if is_positive else "#dc3545"

    return dbc.Card(
        dbc.CardBody([
            html.H4(value, className="mb-1", style={'fontWeight': '600', 'fontSize': '1.4rem'}),
            html.Div(title, className="text-muted small", style={'fontSize': '0.75rem', 'fontWeight': '500'}),
        ], className="p-2"),
        className="shadow-sm",
        style={'borderLeft': f'4px solid {edge}', 'height': '100%'}
    )


def _stat_row(stats):
    return dbc.Row(
        [dbc.Col(create_stat_card(s["label"], s["value"]), width=True) for s in stats],
        className="mb-4 g-2"
    )


layout = html.Div([
    # Data Status Note
    html.Div(id='data-status-container', style={'position': 'fixed', 'top': '15px', 'right': '20px', 'zIndex': 2000, 'maxWidth': '90vw'}),

    # Welcome
    dbc.Row([
        dbc.Col([
            html.H2(id='welcome-line1', className="mb-0"),
            html.Div([
                html.Span(id='welcome-line2', className="lead"),
                html.Span(id='source-badge-container'),
            ]),
        ], width=12)
    ], className="mb-4"),

    # Latest Quarter Stats
    html.H5("Latest Quarter", className="text-muted"),
    html.Div(id='latest-stats-container'),

    # Historical Stats
    html.H5("Since Inception", className="text-muted"),
    html.Div(id='historical-stats-container'),

    # Chart Toggles
    dbc.Row([
        dbc.Col([
            dbc.Label("Timeframe", className="me-2"),
            dbc.RadioItems(
                id="timeframe-radio",
                options=[
                    {"label": "1 Yr", "value": "1yr"},
                    {"label": "5 Yr", "value": "5yr"},
                    {"label": "All", "value": "all"},
                ],
                value="all",
                inline=True,
            ),
        ], width=6),
        dbc.Col([
            dbc.Label("Return View", className="me-2"),
            dbc.RadioItems(
                id="view-mode-radio",
                options=[
                    {"label": "$", "value": "dollar"},
                    {"label": "%", "value": "percent"},
                ],
                value="dollar",
                inline=True,
            ),
        ], width=6),
    ], className="mb-2"),

    # Charts
    dbc.Row([
        dbc.Col(dbc.Card([
            html.H5("Balance & Flows", className="card-title p-2"),
            dcc.Graph(id='balance-flow-chart', style={'height': '450px'})
        ]), width=12)
    ], className="mb-4"),
    dbc.Row([
        dbc.Col(dbc.Card([
            html.H5("Quarterly Returns", className="card-title p-2"),
            dcc.Graph(id='return-combo-chart', style={'height': '450px'})
        ]), width=12)
    ], className="mb-4"),
])

@callback(
    [Output('data-status-container', 'children'),
     Output('welcome-line1', 'children'),
     Output('welcome-line2', 'children'),
     Output('source-badge-container', 'children'),
     Output('latest-stats-container', 'children'),
     Output('historical-stats-container', 'children')],
    [Input('dataset-store', 'data'),
     Input('data-signal', 'data')]
)
def update_overview(source, signal):
    data = dw.get_data(source)
    if not data:
        return None, "Welcome,", "Loading...", None, "Loading...", "Loading..."

    status_note = None
    errors = data.get('errors', [])
    if errors:
        status_note = dbc.Alert(
            [
                html.Div([
                    html.I(className="bi bi-exclamation-triangle-fill me-2"),
                    html.Span("Data Quality Warning", className="fw-bold")
                ], className="d-flex align-items-center mb-1"),
                html.Hr(className="my-1"),
            ] +
            [html.Div(e, className="small mb-2", style={'whiteSpace': 'pre-wrap', 'wordBreak': 'break-word'}) for e in errors],
            color="warning",
            dismissable=True,
            className="py-2 px-3 shadow-sm",
            style={
                'minWidth': '300px',
                'maxHeight': '80vh',
                'overflowY': 'auto',
                'fontSize': '0.85rem',
                'opacity': '0.95'
            }
        )

    line1, line2 = dw.get_welcome(data)
    latest, historical = dw.get_stat_cards(data)
    badge = create_data_source_badge(dw.get_source_summary(data))

    return status_note, line1, line2, badge, _stat_row(latest), _stat_row(historical)


@callback(
    [Output('balance-flow-chart', 'figure'),
     Output('return-combo-chart', 'figure')],
    [Input('dataset-store', 'data'),
     Input('data-signal', 'data'),
     Input('theme-store', 'data'),
     Input('timeframe-radio', 'value'),
     Input('view-mode-radio', 'value')]
)
def update_charts(source, signal, theme, timeframe, view_mode):
    data = dw.get_data(source)
    if not data:
        return {}, {}

    balance_fig = dw.get_balance_flow_chart(data, timeframe=timeframe, theme=theme)
    return_fig = dw.get_return_combo_chart(data, timeframe=timeframe, view_mode=view_mode, theme=theme)
    return balance_fig, return_fig
