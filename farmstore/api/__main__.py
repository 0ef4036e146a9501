import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "farmstore.api.main:app",
        host=os.environ.get("FARMSTORE_HOST", "0.0.0.0"),
        port=int(os.environ.get("FARMSTORE_PORT", "8000")),
        reload=False,
    )
