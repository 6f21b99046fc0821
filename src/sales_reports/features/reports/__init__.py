"""Sales report engine

Validates untrusted report parameters, resolves calendar months into
half-open date ranges, picks one of a fixed set of parameterized aggregation
queries and maps the store's answer to an HTTP outcome (200 rows, 404 when
there is no data, 400 for bad input, 500 when the store fails).

The router only translates HTTP to and from the service functions, which
contain the actual logic."""
