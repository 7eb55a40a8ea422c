from fastapi import Header


async def get_owner_id(x_owner_id: str = Header(..., min_length=1, max_length=255)) -> str:
    """Owner id set by the upstream identity layer (X-Owner-Id header)"""
    return x_owner_id
