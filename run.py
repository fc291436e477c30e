# run.py
import uvicorn
import logging
logging.basicConfig(level=logging.INFO)
logging.getLogger("player.actions").setLevel(logging.DEBUG)

uvicorn.run("player.main:app", host="0.0.0.0", port=8080, reload=False)
