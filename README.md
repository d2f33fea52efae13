# countrydash

A small WSGI service for country dashboards. You register a dashboard for a
country and choose which features it shows: capital, coordinates, population,
area, temperature, precipitation and exchange rates against chosen target
currencies. When a dashboard is viewed, the service fills it in with live data
from public country, weather and currency services. Clients can register
webhooks and are notified when dashboards are registered, changed, patched,
deleted or viewed, and when a viewed country's temperature is below zero.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running the server

```
countrydash
```

The server listens on all interfaces, on the port given in the `PORT`
environment variable, or on 8080 when it is not set. On start it opens the
document store, starts a background thread that purges stale cache entries
once an hour, and serves the routes below.

The WSGI application can also be built directly and handed to any WSGI server:

```python
from countrydash.server import create_app

app = create_app("static")
```

## Storage

Dashboard configurations, webhooks and cached data live in
`countrydash.store.DocumentStore`, an in-process, thread-safe collection of
JSON-like documents. It is kept in a single JSON file, rewritten on every
change. The file is the one named by the `COUNTRYDASH_DATA` environment
variable, or `data/store.json` next to the package directory when that is not
set.

## Endpoints

| Path | Methods | Purpose |
| --- | --- | --- |
| `/dashboard/v1/registrations` or `/dashboard/v1/registrations/` | `GET`, `POST` | List all dashboard configurations, or register a new one |
| `/dashboard/v1/registrations/{id}` (or `?id={id}`) | `GET`, `PUT`, `PATCH`, `DELETE`, `HEAD` | Read, replace, partly update, delete or check one configuration |
| `/dashboard/v1/dashboards/{id}` | `GET` | A dashboard filled in with live data |
| `/dashboard/v1/notifications/` | `GET`, `POST` | List webhooks, or register one |
| `/dashboard/v1/notifications/{id}` | `GET`, `DELETE` | Read or delete one webhook |
| `/dashboard/v1/status/` | `GET` | Status codes of the outside services and the store, webhook count, version and uptime |

`/dashboard/v1/dashboards`, `/dashboard/v1/notifications` and
`/dashboard/v1/status` without the trailing slash redirect to the slashed
form. Any other path serves files from the static directory, with
`index.html` at `/`; a missing file redirects to `/`.

Handler errors are returned as JSON of the form `{"error": "..."}` with a
fitting HTTP status. A method the router does not accept on a path is answered
with `405` and a plain-text body.

### Registering a dashboard

```
POST /dashboard/v1/registrations/
{
  "country": "Norway",
  "isoCode": "NO",
  "features": {
    "temperature": true,
    "precipitation": true,
    "capital": true,
    "coordinates": true,
    "population": true,
    "area": false,
    "targetCurrencies": ["EUR", "USD"]
  }
}
```

Either `country` or `isoCode` must be given; when only the ISO code is given
the country name is looked up. The reply (`201 Created`) holds the new `id`
and its `lastChange` time, in the form `yyyyMMdd HH:mm`. `PUT` and `PATCH`
answer `200` with the same two fields; `DELETE` answers `204`.

Weather is only fetched for a viewed dashboard when coordinates are enabled
and known.

### Registering a webhook

```
POST /dashboard/v1/notifications/
{"url": "http://localhost:9000/hook", "event": "invoke", "country": "no"}
```

The reply is `{"id": "..."}`. Event and country are upper-cased. Allowed
events are `REGISTER`, `CHANGE`, `PATCH`, `DELETE`, `INVOKE` and `LOW_TEMP`.
A webhook with no country fires for every country. Each call is a JSON `POST`
with `id`, `country`, `event` and `time`.

## Using the services from Python

The service functions can be called without the HTTP layer once the store is
open:

```python
from countrydash.store import init_store
from countrydash.util import default_data_path
from countrydash.registration_service import register_dashboard_config
from countrydash.dashboard_service import get_populated_dashboard

init_store(default_data_path())
reply = register_dashboard_config(b'{"country": "Norway", "isoCode": "NO", "features": {"capital": true}}')
dashboard = get_populated_dashboard(reply["id"])
print(dashboard.to_dict())
```

`countrydash.enrichment_service.get_enriched_dashboards()` returns every stored
dashboard enriched in a flatter form. Unlike the dashboards endpoint, it reads
country data (24 hours), weather (2 hours) and exchange rates (12 hours) from
the cache in the store when fresh, and saves fresh lookups there.

The base URLs of the outside services are held in
`countrydash.config.API_ENDPOINTS` and can be changed, for example to point at
a local stand-in.

## What it does not do

- There is no database server: the store is a local JSON file used by one
  process. Several server processes sharing the same file will overwrite each
  other's changes.
- The dashboards endpoint does not use the cache; each view queries the
  outside services again.
- There is no authentication; anyone who can reach the server can register,
  change or delete dashboards and webhooks.