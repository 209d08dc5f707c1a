"""Source templates for the generated per-language instrumentation.

Headers and per-instrument snippets are ``str.format`` templates (literal
braces doubled); middleware sources are emitted verbatim.
"""

# ── Node (TypeScript, prom-client, Express) ──

NODE_METRICS_HEADER = """\
// Prometheus metrics for {app_slug}.
import {{ {imports} }} from 'prom-client';

export const register = new Registry();
collectDefaultMetrics({{ register }});

export const httpRequestsTotal = new Counter({{
  name: 'http_requests_total',
  help: 'Total number of HTTP requests',
  labelNames: [{labels}],
  registers: [register],
}});

export const httpRequestDuration = new Histogram({{
  name: 'http_request_duration_seconds',
  help: 'HTTP request duration in seconds',
  labelNames: [{labels}],
  buckets: [{buckets}],
  registers: [register],
}});
"""

NODE_CUSTOM_METRIC = """
// {comment}
export const {identifier} = new {cls}({{
  name: '{name}',
  help: {help},
  registers: [register],
}});
"""

NODE_MIDDLEWARE = """\
import type { NextFunction, Request, Response } from 'express';
import { httpRequestDuration, httpRequestsTotal, register } from './metrics';

// Records request count and duration for every request.
// Usage: app.use(metricsMiddleware); app.get('/metrics', metricsEndpoint);
export function metricsMiddleware(req: Request, res: Response, next: NextFunction): void {
  const stopTimer = httpRequestDuration.startTimer();
  res.on('finish', () => {
    const labels = {
      method: req.method,
      route: req.route?.path ?? req.baseUrl + req.path,
      status: String(res.statusCode),
    };
    httpRequestsTotal.inc(labels);
    stopTimer(labels);
  });
  next();
}

// Serves the registry in the Prometheus text exposition format.
export async function metricsEndpoint(_req: Request, res: Response): Promise<void> {
  res.set('Content-Type', register.contentType);
  res.end(await register.metrics());
}
"""

# ── Python (prometheus_client, FastAPI) ──

PYTHON_METRICS_HEADER = '''\
"""Prometheus metrics for {app_slug}."""

from prometheus_client import {imports}

HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    [{labels}],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    [{labels}],
    buckets=({buckets}),
)
'''

PYTHON_CUSTOM_METRIC = """
# {comment}
{identifier} = {cls}(
    "{name}",
    {help},
)
"""

PYTHON_MIDDLEWARE = '''\
"""Request instrumentation for FastAPI.

Usage:
    app.middleware("http")(metrics_middleware)
    app.add_route("/metrics", metrics_endpoint)
"""

import time

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .metrics import HTTP_REQUEST_DURATION_SECONDS, HTTP_REQUESTS_TOTAL


async def metrics_middleware(request: Request, call_next):
    """Record request count and duration for every request."""
    start = time.perf_counter()
    status = "500"
    try:
        response = await call_next(request)
        status = str(response.status_code)
        return response
    finally:
        route = request.scope.get("route")
        path = getattr(route, "path", request.url.path)
        labels = {"method": request.method, "route": path, "status": status}
        HTTP_REQUESTS_TOTAL.labels(**labels).inc()
        HTTP_REQUEST_DURATION_SECONDS.labels(**labels).observe(time.perf_counter() - start)


async def metrics_endpoint(request: Request) -> Response:
    """Serve metrics in the Prometheus text exposition format."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
'''

# ── Go (client_golang, net/http) ──

GO_METRICS_HEADER = """\
// Package instrumentation holds the Prometheus metrics for {app_slug}.
package instrumentation

import (
\t"github.com/prometheus/client_golang/prometheus"
\t"github.com/prometheus/client_golang/prometheus/promauto"
)

// HTTPRequestsTotal counts every HTTP request by method, route and status.
var HTTPRequestsTotal = promauto.NewCounterVec(
\tprometheus.CounterOpts{{
\t\tName: "http_requests_total",
\t\tHelp: "Total number of HTTP requests",
\t}},
\t[]string{{{labels}}},
)

// HTTPRequestDuration observes request latency in seconds.
var HTTPRequestDuration = promauto.NewHistogramVec(
\tprometheus.HistogramOpts{{
\t\tName:    "http_request_duration_seconds",
\t\tHelp:    "HTTP request duration in seconds",
\t\tBuckets: []float64{{{buckets}}},
\t}},
\t[]string{{{labels}}},
)
"""

GO_CUSTOM_METRIC = """
// {identifier} {comment}
var {identifier} = promauto.New{cls}(prometheus.{cls}Opts{{
\tName: "{name}",
\tHelp: {help},
}})
"""

GO_MIDDLEWARE = """\
package instrumentation

import (
\t"net/http"
\t"strconv"
\t"time"

\t"github.com/prometheus/client_golang/prometheus/promhttp"
)

type statusRecorder struct {
\thttp.ResponseWriter
\tstatus int
}

func (r *statusRecorder) WriteHeader(code int) {
\tr.status = code
\tr.ResponseWriter.WriteHeader(code)
}

// routeLabel is the matched route pattern, never the raw path.
// http.ServeMux (Go 1.23+) fills r.Pattern while routing; other routers
// should wrap each route with InstrumentRoute instead.
func routeLabel(r *http.Request) string {
\tif r.Pattern != "" {
\t\treturn r.Pattern
\t}
\treturn "unmatched"
}

func observe(route string, next http.Handler) http.Handler {
\treturn http.HandlerFunc(func(w http.ResponseWriter, r *http.Request) {
\t\tstart := time.Now()
\t\trec := &statusRecorder{ResponseWriter: w, status: http.StatusOK}
\t\tnext.ServeHTTP(rec, r)
\t\tlabel := route
\t\tif label == "" {
\t\t\tlabel = routeLabel(r)
\t\t}
\t\tstatus := strconv.Itoa(rec.status)
\t\tHTTPRequestsTotal.WithLabelValues(r.Method, label, status).Inc()
\t\tHTTPRequestDuration.WithLabelValues(r.Method, label, status).Observe(time.Since(start).Seconds())
\t})
}

// MetricsMiddleware records request count and duration for every request.
func MetricsMiddleware(next http.Handler) http.Handler {
\treturn observe("", next)
}

// InstrumentRoute records requests to one handler under a fixed route pattern.
func InstrumentRoute(pattern string, next http.Handler) http.Handler {
\treturn observe(pattern, next)
}

// MetricsHandler serves metrics in the Prometheus text exposition format.
func MetricsHandler() http.Handler {
\treturn promhttp.Handler()
}
"""
