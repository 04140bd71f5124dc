# notely

A small JSON web service that keeps users and their notes in SQLite. Each
user gets a randomly generated API key when created; every other user or note
request is authenticated with that key.

## Installing

```
pip install .
```

For running the tests as well:

```
pip install ".[test]"
pytest
```

## Running

The `notely` command starts the server on all interfaces. It takes no options
besides `--help`; its configuration comes from the environment, and from a
`.env` file in the working directory if one exists.

| Variable       | Meaning                                                              |
|----------------|----------------------------------------------------------------------|
| `PORT`         | Port to listen on. Required; the command exits with status 1 without it. |
| `DATABASE_URL` | SQLite database to store users and notes in. Optional.               |

```
PORT=8080 DATABASE_URL=notely.db notely
```

`DATABASE_URL` may be a plain file path, `:memory:`, a `file:` URI or a
`sqlite:///path` URL. On start-up the `users` and `notes` tables are created if
they do not exist yet.

When `DATABASE_URL` is not set, the server still starts, but only the index
page and the health check are served; the user and note endpoints are left
out.

## Endpoints

| Method | Path          | Auth | Description                                   |
|--------|---------------|------|-----------------------------------------------|
| GET    | `/`           | no   | `static/index.html`, read from disk.          |
| GET    | `/v1/healthz` | no   | Readiness check, answers `{"status": "ok"}`.  |
| POST   | `/v1/users`   | no   | Create a user from `{"name": "..."}`.         |
| GET    | `/v1/users`   | yes  | The user that owns the API key.               |
| GET    | `/v1/notes`   | yes  | All notes of that user.                       |
| POST   | `/v1/notes`   | yes  | Create a note from `{"note": "..."}`.         |

Authenticated requests carry the key in the `Authorization` header:

```
Authorization: ApiKey placeholder
```

A missing or malformed header is answered with 401, an unknown key with 404.
A request body that cannot be decoded is answered with 500. Successful
creations answer 201. Errors always come back as JSON of the form
`{"error": "..."}`.

Users are returned as

```json
{
  "id": "...",
  "created_at": "2024-01-01T00:00:00Z",
  "updated_at": "2024-01-01T00:00:00Z",
  "name": "...",
  "api_key": "..."
}
```

and notes as

```json
{
  "id": "...",
  "created_at": "2024-01-01T00:00:00Z",
  "updated_at": "2024-01-01T00:00:00Z",
  "note": "...",
  "user_id": "..."
}
```

Cross-origin requests from any `http://` or `https://` origin are allowed for
the methods GET, POST, PUT, DELETE and OPTIONS; preflight answers carry a
max-age of 300 seconds, and the `Link` header is exposed.

## Using it from Python

The application can be built without starting a server, for example to embed
it or to test against it:

```python
from notely.app import create_app
from notely.database import Queries, connect

db = Queries(connect("notely.db"))
db.create_schema()

app = create_app(db, "static")
client = app.test_client()
print(client.get("/v1/healthz").get_json())
```

Passing `None` as the database gives the same reduced set of endpoints as
running without `DATABASE_URL`. The second argument is the directory that
`index.html` is read from; it defaults to `static` in the working directory.

The pieces are usable on their own:

- `notely.auth.get_api_key(headers)` returns the key from an
  `Authorization: ApiKey <key>` header, raising `NoAuthHeaderIncludedError` or
  `MalformedAuthHeaderError` (both `AuthError`).
- `notely.database.Queries` runs the stored queries: `create_user`, `get_user`,
  `create_note`, `get_note` and `get_notes_for_user`; lookups that find
  nothing raise `RecordNotFoundError`.
- `notely.models` converts stored rows to the API's `User` and `Note`, whose
  `to_dict()` gives the JSON shape shown above.
- `notely.responses.respond_with_json` and `respond_with_error` build the JSON
  responses the handlers send.

## What it does not do

- No index page is shipped with the package: `GET /` answers 500 unless an
  `index.html` exists in the static directory.
- Storage is SQLite only; other database servers are not supported.
- There are no endpoints for updating or deleting users or notes.