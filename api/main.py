from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from seqcount.calc.errors import EvaluationError
from seqcount.config import STATS, StatsConfig
from seqcount.game.engine import CountingEngine


# Pydantic model for one turn of the game
class SubmitRequest(BaseModel):
    submitter: str
    text: str


# Pydantic model for the calculator command
class CalcRequest(BaseModel):
    text: str


def create_app(engine: CountingEngine | None = None, stats_config: StatsConfig = STATS) -> FastAPI:
    """Build the HTTP host around one counting engine.

    When no engine is given, the corpus and persisted counters are loaded at
    startup from the environment-driven config (a missing corpus record
    aborts startup). Counters are flushed in the background while the app
    runs and once more on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "engine", None) is None:
            app.state.engine = CountingEngine.from_config(stats_config=stats_config)
        flusher = app.state.engine.make_flusher(stats_config)
        flusher.start()
        try:
            yield
        finally:
            flusher.stop()

    app = FastAPI(
        title="Sequence Counting Game API",
        description="Counting game where every chain must follow a known integer sequence.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.engine = engine

    def _engine() -> CountingEngine:
        return app.state.engine

    @app.post("/submit", summary="Take a turn", response_description="Accepted, rejected or ignored outcome")
    def submit(request: SubmitRequest):
        """
        Evaluates `text` and offers the resulting integer as the next value of the chain.

        Text that does not evaluate to an integer is ignored and leaves the chain untouched.
        Values are returned as decimal strings since they can be arbitrarily large.
        """
        return _engine().submit(request.submitter, request.text).to_dict()

    @app.post("/calc", summary="Evaluate an expression", response_description="The integer result")
    def calc(request: CalcRequest):
        try:
            result = _engine().calc(request.text)
        except EvaluationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"result": str(result)}

    @app.get("/stats", summary="Game statistics", response_description="Totals and current chain length")
    def stats():
        return _engine().get_stats().to_dict()

    @app.get("/top/{tally}", summary="Leaderboard page", response_description="Keys ranked by count")
    def top(tally: str, page: int = 0):
        """
        Returns one page (10 rows) of `users`, `seqs` or `numbers`, highest count first.
        """
        try:
            rows = _engine().top_by_tally(tally, page)
        except KeyError as e:
            raise HTTPException(status_code=404, detail=str(e.args[0]))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"tally": tally, "page": page, "rows": [{"key": key, "count": count} for key, count in rows]}

    @app.get("/health", summary="Health check", response_description="API health status")
    async def health_check():
        """
        Checks the health of the API.
        """
        return {"status": "ok"}

    return app


app = create_app()

# To run this API:
# uvicorn api.main:app --port 8000
# Then access http://127.0.0.1:8000/docs for Swagger UI
