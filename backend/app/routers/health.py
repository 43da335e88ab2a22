from fastapi import APIRouter

from evalconf.version import __version__

router = APIRouter()


@router.get("/ping")
def ping():
    return {"ok": True, "version": __version__}
