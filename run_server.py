"""
Entry point for running the relay server with uvicorn.

Access log lines for the monitoring endpoints are filtered out.
"""

if __name__ == "__main__":
    import logging

    import uvicorn

    from screen_relay.uvicorn_filters import ExcludeMetricsFilter

    logging.getLogger("uvicorn.access").addFilter(ExcludeMetricsFilter())

    uvicorn.run("screen_relay:application", factory=True, host="0.0.0.0", port=8000)
