# hypercontacts

A small contacts service that serves one in-memory contact list two ways
from a single WSGI app:

- **Mobile** – Hyperview XML screens under `/mobile/contacts`: a searchable,
  paged list with swipe rows, detail screens, add and edit forms with
  validation, delete confirmations and toasts.
- **Data API** – JSON endpoints under `/api/v1/contacts` for listing,
  creating, reading, updating and deleting contacts.

A `GET /` is redirected (303) according to its `Accept` header:
`application/vnd.hyperview+xml` goes to `/mobile/contacts`, `text/html` goes
to `/contacts`; any other `Accept` value gets a `400` JSON error.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running the server

```
hypercontacts --host localhost --port 42069
```

Both options are optional; the defaults are `localhost` and `42069`.

At start-up the contacts are read from the JSON file named by the
`HYPERCONTACTS_DB` environment variable, or from
`business/contacts/contacts.json` relative to the working directory. The
file must hold a JSON array of objects with `id`, `first`, `last`, `phone`
and `email` keys. If `app/hypermedia/web/static` exists below the working
directory, files in it are served under `/static/`. The session signing key
is taken from `HYPERCONTACTS_SESSION_KEY`; without it a random key is used.

The server writes structured JSON log lines to standard output, one per
event, each carrying `time`, `level`, `file`, `msg`, `service` (`HTMX`) and
the request's `trace_id`. Each request is logged when it starts and when it
completes. On SIGINT or SIGTERM it stops gracefully, waiting up to five
seconds.

## Reading the logs

`hypercontacts-logfmt` reads JSON log lines from standard input and prints
one readable line per record:

```
hypercontacts | hypercontacts-logfmt
```

Each line starts with the service, time, source file, level, trace id and
message, separated by `: `, followed by every other field as `key[value]`.
Lines that are not JSON objects are passed through unchanged. To see only
one service's records (compared case-insensitively; other lines are
dropped):

```
hypercontacts | hypercontacts-logfmt --service HTMX
```

`hypercontacts.logfmt.format_line(line, service)` does the same for a single
line and returns `None` for a line that is filtered out.

## Data API

| Method | Path                    | Action                                   |
|--------|-------------------------|------------------------------------------|
| GET    | `/api/v1/contacts`      | list, with optional `q`, `page`, `rows`  |
| POST   | `/api/v1/contacts`      | create (`201`)                           |
| GET    | `/api/v1/contacts/{id}` | fetch one                                |
| PUT    | `/api/v1/contacts/{id}` | update the fields given                  |
| DELETE | `/api/v1/contacts/{id}` | delete (`204`)                           |

Listing returns `{"contacts": [...], "page": ..., "pages": ..., "total": ...}`,
sorted by first name; `q` matches as a substring of the first name, last
name, e-mail or phone. Contacts are returned with `id`, `first`, `last`,
`phone` and `email` keys.

A new contact needs `first_name`, `last_name`, `phone` and a valid `email`:

```
{"first_name": "Ada", "last_name": "Example", "phone": "555-0100", "email": "ada@example.com"}
```

An update takes the same keys, each optional. Validation failures come back
as `400` with a body such as
`{"error": "data validation error", "fields": {"email": "email must be a valid email address"}}`.
An unknown id answers `500` with the error message in the body.

## Mobile routes

| Method | Path                              | Screen or fragment                 |
|--------|-----------------------------------|------------------------------------|
| GET    | `/mobile/contacts`                | list (`rows_only=true` for rows)   |
| GET    | `/mobile/contacts/new`            | add form                           |
| POST   | `/mobile/contacts/new`            | create                             |
| GET    | `/mobile/contacts/{id}`           | details                            |
| GET    | `/mobile/contacts/{id}/edit`      | edit form                          |
| POST   | `/mobile/contacts/{id}/edit`      | update                             |
| POST   | `/mobile/contacts/{id}/delete`    | delete                             |
| GET    | `/mobile/contacts/{id}/email`     | e-mail uniqueness check            |

The list shows 20 contacts per page. Responses are sent as
`application/vnd.hyperview+xml` with HTTP status `200`; validation errors
are shown inside the returned form fragment.

## Using it as a library

```python
import sys

from hypercontacts.contacts import ContactsCore
from hypercontacts.logger import Level, Logger

log = Logger(sys.stdout, Level.INFO, "HTMX", None)
core = ContactsCore(log, "contacts.json")

page = core.query("", 1, 10)
ada = core.query_by_id(1)
```

Lookups, updates and deletes of unknown ids raise `ContactNotFoundError`.
`hypercontacts.mobile.views` builds the Hyperview documents and
`hypercontacts.mobile.hxml.to_xml` turns them into `xml.etree` elements.
`hypercontacts.mux.web_app` builds the WSGI application from a
`WebAppConfig` and a route adder, and `hypercontacts.server.run` serves it.

## What it does not do

- There is no HTML front end. Nothing is served at `/contacts`, so a
  browser redirected there from `/` gets a `404`.
- Contacts live in memory only; changes are lost when the server stops and
  are never written back to the JSON file.
- `ContactsCore` can run a simulated archive job (`archive`,
  `archive_poll`, `archive_rm`, `archive_file`) and `SessionStore` can carry
  flash messages, but no route uses either.