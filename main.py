import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()


def main():
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    print(f"Stream It listening on http://{host}:{port}")
    uvicorn.run("streamit.main:app", host=host, port=port)


if __name__ == "__main__":
    main()
