"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from photo_contest.domain.errors import LockedError, SubmissionNotFoundError
from photo_contest.domain.submissions import SubmissionUpdate

if TYPE_CHECKING:
    from photo_contest.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


class SubmissionPatch(BaseModel):
    """Status and/or winner change for one submission."""

    status: str | None = None
    is_winner: bool | None = None


class BatchItem(SubmissionPatch):
    """Change for one submission inside a batch."""

    key: str


class BatchRequest(BaseModel):
    """Batch of submission changes."""

    updates: list[BatchItem]


class FlagsPatch(BaseModel):
    """Contest flag toggles."""

    test_mode: bool | None = None
    submissions_open: bool | None = None
    winners_locked: bool | None = None


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/submissions", dependencies=[Depends(require_admin)])
async def list_submissions(request: Request) -> dict[str, object]:
    """Return every submission in the catalog."""
    container: AppContainer = request.app.state.container
    return {"submissions": container.admin_service.list_submissions()}


@router.get("/submissions/{key}", dependencies=[Depends(require_admin)])
async def get_submission(key: str, request: Request) -> dict[str, object]:
    """Return one submission."""
    container: AppContainer = request.app.state.container
    submission = container.admin_service.get_submission(key)
    if submission is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return submission


@router.patch("/submissions/{key}", dependencies=[Depends(require_admin)])
async def update_submission(
    key: str, patch: SubmissionPatch, request: Request
) -> dict[str, object]:
    """Change the status or winner flag of a submission."""
    container: AppContainer = request.app.state.container
    try:
        return container.admin_service.update_submission(
            key, status=patch.status, is_winner=patch.is_winner
        )
    except SubmissionNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    except LockedError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Winners are locked"
        ) from exc


@router.post("/submissions/batch", dependencies=[Depends(require_admin)])
async def batch_update(batch: BatchRequest, request: Request) -> dict[str, int]:
    """Apply many submission changes at once."""
    container: AppContainer = request.app.state.container
    return container.admin_service.batch_update(
        [
            SubmissionUpdate(key=item.key, status=item.status, is_winner=item.is_winner)
            for item in batch.updates
        ]
    )


@router.delete("/submissions", dependencies=[Depends(require_admin)])
async def clear_submissions(request: Request) -> dict[str, int]:
    """Remove every submission and session."""
    container: AppContainer = request.app.state.container
    return container.admin_service.clear_submissions()


@router.get("/sessions", dependencies=[Depends(require_admin)])
async def list_sessions(request: Request) -> dict[str, object]:
    """Return in-progress entry sessions."""
    container: AppContainer = request.app.state.container
    return {"sessions": container.admin_service.list_sessions()}


@router.get("/flags", dependencies=[Depends(require_admin)])
async def get_flags(request: Request) -> dict[str, object]:
    """Return the contest flags."""
    container: AppContainer = request.app.state.container
    return container.admin_service.get_flags()


@router.patch("/flags", dependencies=[Depends(require_admin)])
async def update_flags(patch: FlagsPatch, request: Request) -> dict[str, object]:
    """Toggle contest flags."""
    container: AppContainer = request.app.state.container
    return container.admin_service.update_flags(
        test_mode=patch.test_mode,
        submissions_open=patch.submissions_open,
        winners_locked=patch.winners_locked,
    )


@router.get("/ui", response_class=HTMLResponse)
async def admin_ui() -> HTMLResponse:
    """Minimal admin UI that consumes the admin API."""
    return HTMLResponse(_ADMIN_UI_HTML)


_ADMIN_UI_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Photo Contest Admin</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }
      h1 { margin-bottom: 0.5rem; }
      .row { margin-bottom: 1rem; }
      input { padding: 0.4rem 0.6rem; width: 320px; }
      button { padding: 0.4rem 0.8rem; margin-right: 0.5rem; }
      pre { background: #f6f6f6; padding: 1rem; overflow: auto; }
    </style>
  </head>
  <body>
    <h1>Photo Contest Admin</h1>
    <div class="row">
      <label>Admin token</label><br />
      <input id="token" type="password" placeholder="X-Admin-Token" />
    </div>
    <div class="row">
      <button onclick="call('GET', '/admin/submissions')">Submissions</button>
      <button onclick="call('GET', '/admin/sessions')">Sessions</button>
      <button onclick="call('GET', '/admin/flags')">Flags</button>
    </div>
    <div class="row">
      <button onclick="call('PATCH', '/admin/flags', {submissions_open: true})">Open</button>
      <button onclick="call('PATCH', '/admin/flags', {submissions_open: false})">Close</button>
      <button onclick="call('PATCH', '/admin/flags', {winners_locked: true})">Lock winners</button>
      <button onclick="call('PATCH', '/admin/flags', {test_mode: true})">Test mode on</button>
      <button onclick="call('PATCH', '/admin/flags', {test_mode: false})">Test mode off</button>
    </div>
    <pre id="output">Ready.</pre>
    <script>
      async function call(method, path, body) {
        const token = document.getElementById('token').value;
        const output = document.getElementById('output');
        output.textContent = 'Loading...';
        const res = await fetch(path, {
          method,
          headers: { 'X-Admin-Token': token, 'Content-Type': 'application/json' },
          body: body ? JSON.stringify(body) : undefined
        });
        if (!res.ok) {
          output.textContent = 'Error: ' + res.status;
          return;
        }
        const data = await res.json();
        output.textContent = JSON.stringify(data, null, 2);
      }
    </script>
  </body>
</html>
"""
