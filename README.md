# luminor

Building blocks for a property-management web platform, written as plain
Python objects and WSGI components on top of Werkzeug.

## What is in the package

- **Platform** (`luminor.platform`)
  - `clock`: the `Clock` protocol, `RealClock` and `FixedClock`.
  - `eventbus`: `EventBus`, a synchronous in-process bus that calls the
    handlers subscribed to an event's exact type, in order, and raises
    `EventHandlerError` at the first failing handler.
  - `eventstore`: `StoredEvent`, `UncommittedEvent`, the `EventStore`
    protocol and `InMemoryEventStore`, which appends all-or-nothing and
    raises `ConcurrencyConflictError` on a stream version mismatch.
  - `session`: `CookieSessionStore` and `Session`, sessions kept in
    HMAC-signed cookies (`new_store(secret_key)` gives 30 days, HttpOnly,
    SameSite=Lax), with one-time flash values.
  - `auth`: the `User` record, context helpers (`with_user`,
    `user_from_context`, `must_user_from_context`, `is_authenticated`) and
    WSGI guards `load_user`, `require_auth`, `require_party_kind` and
    `require_guest`. Guards redirect with 303 to the localized `/sign-in`
    or `/dashboard` path; an empty party kind counts as
    `property_manager`.
  - `flash`: `FlashType`, `FlashMessage`, `set_flash`, `set_flash_key`,
    `flash_middleware` and `messages_from_context`.
  - `httplog`: `logging_middleware`, which logs method, path, status and
    duration of each request.
  - `ollama`: `OllamaClient` with `embed(model, text)` and
    `chat(model, messages)` against an Ollama server's `/api/embeddings`
    and `/api/chat`; failures raise `OllamaError`.
  - `agentworkload`: the `WorkloadPort` protocol, `WorkloadRequest`,
    `WorkloadResult`, `ActionKind`, a deterministic `FakeAdapter` and a
    `LiveAdapter`.
- **Internationalisation** (`luminor.platform.i18n`)
  - `locale`: `Locale` (en, de, fr), `parse_locale`, `default_locale`,
    `supported_locales` and `resolve_from_accept_language`.
  - `translator`: `Translator` with `{name}` interpolation, one/other
    plurals, fallback to the default locale and `missing_keys_for`;
    `load_translator(directory)` reads `en.json`, `de.json` and `fr.json`.
  - `context`: the immutable request `Context` and helpers such as `t`,
    `t_plural`, `localized_path` and `alternate_localized_path`.
  - `format`: `format_date_long`, `format_date_short`, `format_number`.
  - `middleware`: `LocaleMiddleware`, which lets static files and paths
    with an extension through, redirects unprefixed paths with 308 to a
    locale chosen from `Accept-Language`, and for `/<locale>/...` strips
    the prefix and sets `Content-Language` and `Vary: Accept-Language`.
- **Retrieval-augmented generation** (`luminor.rag`)
  - `chunker`: `chunk_text` and `estimate_tokens`.
  - `document`: `Document`, `Chunk`, `SearchResult`, `new_document`,
    `new_chunk`.
  - `service`: `RagService` (index, search, chat, delete) and the
    `Repository`, `Embedder` and `Generator` protocols it works through.
  - `facade`: `RagFacade` and its DTOs; indexing publishes a
    `DocumentIndexedEvent`.
  - `web`: `RagHandler` and `create_app(rag)`, a JSON API.
  - `testharness`: `make_document(title, content)`.
- **Rentals** (`luminor.rental`)
  - `domain`: the event-sourced `Rental` aggregate, `RentalEstablished`,
    `deserialize_event` and `establish_new_rental`, which allows at most
    one rental per subject and tenant.
  - `facade`: `RentalFacade`, which appends the events to an `EventStore`,
    publishes `RentalEstablishedEvent` and lists rentals from a query model.
  - `projection`: `register_projection_subscribers(bus, writer)`, which
    feeds rental events to a `ProjectionWriter`.
- **Value types** (`luminor.shared.valuetypes`): `EmailAddress` and
  `new_email_address`, a trimmed, lower-cased, validated address.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Examples

Validating an e-mail address:

```python
from luminor.shared.valuetypes import new_email_address

email = new_email_address("  User@Example.COM ")
print(email)             # user@example.com
print(email.is_zero())   # False
```

Splitting text into overlapping chunks for embedding:

```python
from luminor.rag.chunker import chunk_text, estimate_tokens

text = " ".join(["word"] * 1200)
chunks = chunk_text(text, 500, 50)
sizes = [estimate_tokens(chunk) for chunk in chunks]
```

Negotiating a locale:

```python
from luminor.platform.i18n.locale import parse_locale, resolve_from_accept_language

resolve_from_accept_language("de-DE,de;q=0.9,en;q=0.8")  # Locale.DE
parse_locale(" FR ")                                      # Locale.FR
```

Creating a rental with the in-memory event store:

```python
from luminor.platform.clock import RealClock
from luminor.platform.eventbus import EventBus
from luminor.platform.eventstore import InMemoryEventStore
from luminor.rental.facade import CreateRentalDTO, RentalEstablishedEvent, RentalFacade

bus = EventBus()
bus.subscribe(RentalEstablishedEvent, lambda event: print(event.rental_id))

facade = RentalFacade(InMemoryEventStore(), bus, RealClock(), checker, query_model)
rental_id = facade.create_rental(
    CreateRentalDTO(
        subject_id="subject-1",
        tenant_party_id="party-1",
        org_id="org-1",
        created_by_account_id="account-1",
    )
)
```

Here `checker` offers `exists_by_subject_and_tenant` and `query_model`
offers the `find_by_*` lookups of the rentals read model.

## The RAG API

`luminor.rag.web.create_app(rag)` returns a WSGI application exposing:

| Method | Path                               | Purpose                        |
|--------|------------------------------------|--------------------------------|
| POST   | `/api/rag/documents`               | index a document (201)         |
| DELETE | `/api/rag/documents/<document_id>` | delete a document (204)        |
| POST   | `/api/rag/search`                  | similarity search              |
| POST   | `/api/rag/chat`                    | answer a question with sources |

`rag` is any object offering the `RagFacade` methods `index_document`,
`search`, `chat` and `delete_document`. Bad request bodies and missing
fields give 400 with `{"error": ...}`; failures of the use cases give 500.
The application can be mounted in any WSGI server and wrapped with
`LocaleMiddleware`, `logging_middleware` and the `auth` guards.

## What the package does not do

- It has no command and does not start a server of its own; the WSGI
  applications and middlewares are meant to be composed and served by the
  caller.
- It has no persistent storage. The only event store is
  `InMemoryEventStore`; the RAG `Repository` (including vector similarity
  search), the rental read model and the `ProjectionWriter` must be
  supplied by the caller.
- It ships no message catalogues; `load_translator` reads them from a
  directory the caller provides.
- It has no cross-site request forgery protection.
- `LiveAdapter` has no agent backend: every call raises `RuntimeError`.
  Only `FakeAdapter` returns results.