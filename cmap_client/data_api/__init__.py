"""
Simons CMAP Data Module
=======================================================

* Thin client over the CMAP REST service: every accessor composes one
statement (usually a stored-procedure call), sends it as an authenticated
GET to `/api/data/query` and returns the CSV response as a pandas DataFrame.
* Searching, matching and aggregation all run server-side.

* Notes
- Register the API key once with `set_api_key(...)`, or export CMAP_API_KEY.
- Dates are passed to the service verbatim ("YYYY-MM-DD" or ISO datetimes).
- Latitude is -90..90, longitude -180..180 and depth grows positive downward;
  the service, not the client, enforces these ranges.

* Modules
------
    api_rest        request executor and `query` gateway (RestAPI)
    api_cmap        catalog, dataset, variable, cruise, subset and match accessors (CMAP)
    credentials     API key file and immutable Credentials
    statement       bind-variable rendering of query statements
    errors          exception hierarchy rooted at CMAPError
"""
