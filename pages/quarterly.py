from dash import dcc, html, callback, Input, Output
import dash_bootstrap_components as dbc
import dash_ag_grid as dag
import dash_wrappers as dw

MONEY_COLUMNS = {
    "Begin GAAP", "Contributions", "Redemptions (GAAP)", "Redemptions (NAV)",
    "Income Paid", "Income Reinvested", "Unrealized", "Tax", "Other",
    "End GAAP", "End NAV", "Net Flow", "Realized (Ann)", "Total (Ann)",
}

layout = html.Div([
    dbc.Row([
        dbc.Col(dbc.Card([
            html.H5("Quarterly Ledger", className="card-title p-2"),
            dcc.Loading(html.Div(id='quarterly-table-container'))
        ]), width=12, className="mb-4"),
    ]),
])

@callback(
    Output('quarterly-table-container', 'children'),
    [Input('dataset-store', 'data'),
     Input('data-signal', 'data'),
     Input('theme-store', 'data')]
)
def update_quarterly(source, signal, theme):
    data = dw.get_data(source)
    if not data: return "Loading..."

    table_df = dw.get_quarterly_table_data(data)
    if table_df.empty:
        return html.P("No quarterly activity in this dataset.", className="text-muted p-2")

    column_defs = []
    for col in table_df.columns:
        col_def = {"field": col, "headerName": col}
        if col == "Quarter":
            col_def["pinned"] = "left"
        if col in MONEY_COLUMNS:
            col_def["type"] = "rightAligned"
        column_defs.append(col_def)

    return dag.AgGrid(
        id="quarterly-grid",
        rowData=table_df.to_dict('records'),
        columnDefs=column_defs,
        defaultColDef={"minWidth": 120, "sortable": True, "filter": True, "resizable": True},
        className="ag-theme-alpine-dark" if theme == "dark" else "ag-theme-alpine",
        dashGridOptions={"domLayout": "autoHeight"}
    )
