"""FastAPI application exposing the MarginIQ financial insights API."""

from typing import Dict

from fastapi import FastAPI

from marginiq.api.routes.comparisons import router as comparisons_router
from marginiq.api.routes.delivery import router as delivery_router
from marginiq.api.routes.franchise import router as franchise_router
from marginiq.api.routes.insights import router as insights_router
from marginiq.api.routes.menu import router as menu_router
from marginiq.api.routes.waste import router as waste_router

app = FastAPI(title="MarginIQ")

app.include_router(comparisons_router)
app.include_router(insights_router)
app.include_router(menu_router)
app.include_router(franchise_router)
app.include_router(waste_router)
app.include_router(delivery_router)


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("marginiq.main:app", host="127.0.0.1", port=8000, reload=True)
