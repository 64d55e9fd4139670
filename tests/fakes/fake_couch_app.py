from typing import Any, Dict, List

from aiohttp import web

from couchdb_adapter.infrastructure.couchdb.errors import CouchDbError

from tests.fakes.fake_couch import InMemoryCouch


def build_app(store: InMemoryCouch) -> web.Application:
    """CouchDB-compatible HTTP surface over an InMemoryCouch, for driver tests."""
    requests: List[Dict[str, Any]] = []

    @web.middleware
    async def record_and_translate(request: web.Request, handler):
        if request.app["outage"]:
            return web.Response(status=502, text="<html>Bad Gateway</html>", content_type="text/html")
        body = await request.json() if request.can_read_body else None
        requests.append(
            {
                "method": request.method,
                "path": request.path,
                "query": dict(request.query),
                "json": body,
                "authorization": request.headers.get("Authorization"),
            }
        )
        try:
            return await handler(request)
        except CouchDbError as e:
            return web.json_response({"error": e.error, "reason": e.reason}, status=e.status)

    async def server_info(request):
        return web.json_response({"couchdb": "Welcome", "version": "3.3.3"})

    async def all_dbs(request):
        return web.json_response(sorted(store.databases))

    async def get_db(request):
        return web.json_response(store.db_info(request.match_info["db"]))

    async def put_db(request):
        return web.json_response(store.create_db(request.match_info["db"]), status=201)

    async def delete_db(request):
        return web.json_response(store.delete_db(request.match_info["db"]))

    async def post_doc(request):
        doc = await request.json()
        return web.json_response(store.save(request.match_info["db"], doc), status=201)

    async def get_doc(request):
        return web.json_response(store.get(request.match_info["db"], request.match_info["docid"]))

    async def delete_doc(request):
        result = store.destroy(
            request.match_info["db"], request.match_info["docid"], request.query.get("rev")
        )
        return web.json_response(result)

    async def all_docs(request):
        body = await request.json()
        return web.json_response(store.all_docs(request.match_info["db"], body["keys"]))

    async def find(request):
        body = await request.json()
        return web.json_response(store.find(request.match_info["db"], body))

    async def bulk_docs(request):
        body = await request.json()
        return web.json_response(store.bulk(request.match_info["db"], body["docs"]), status=201)

    app = web.Application(middlewares=[record_and_translate])
    app["requests"] = requests
    # when set, every request gets the HTML error page of a failing proxy
    app["outage"] = False
    app.router.add_get("/", server_info)
    app.router.add_get("/_all_dbs", all_dbs)
    app.router.add_post("/{db}/_all_docs", all_docs)
    app.router.add_post("/{db}/_find", find)
    app.router.add_post("/{db}/_bulk_docs", bulk_docs)
    app.router.add_get("/{db}/{docid}", get_doc)
    app.router.add_delete("/{db}/{docid}", delete_doc)
    app.router.add_get("/{db}", get_db)
    app.router.add_put("/{db}", put_db)
    app.router.add_delete("/{db}", delete_db)
    app.router.add_post("/{db}", post_doc)
    return app
