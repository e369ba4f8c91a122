"""Health check endpoints including database connectivity."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from quoteflow.database import get_db

router = APIRouter()


@router.get("")
async def health():
    """Basic health check."""
    return {"status": "healthy"}


@router.get("/db")
async def db_health(db: AsyncSession = Depends(get_db)):
    """Check database connectivity."""
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
        return {"status": "healthy", "dialect": db.bind.dialect.name}
    except Exception as e:
        raise HTTPException(503, f"Database health check failed: {e}") from e
