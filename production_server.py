import os
import sys

import uvicorn

# Ensure current directory is in path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from main import app

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    print(f"==========================================")
    print(f"SBK Ladder Manager Production Server Started")
    print(f"Access at: http://localhost:{port}")
    print(f"==========================================")

    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
