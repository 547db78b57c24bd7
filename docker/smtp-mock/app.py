import logging
import sys

from fastapi import FastAPI, Response, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field

logging.basicConfig(stream=sys.stdout, level=logging.INFO, format="%(asctime)sZ %(levelname)s %(message)s")

app = FastAPI(title="SMTP Mock", version="1.0.0")

class SendEmail(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sender: EmailStr = Field(alias="from")
    to: list[EmailStr]
    subject: str
    html: str

@app.get("/health")
def health() -> dict:
    return {"status": "ok"}

@app.post("/send", status_code=status.HTTP_202_ACCEPTED)
async def send(payload: SendEmail) -> Response:
    logging.info(
        "SMTP-MOCK send from=%s to=%s subject=%r html=%r",
        payload.sender, payload.to, payload.subject, payload.html,
    )
    return Response(status_code=status.HTTP_202_ACCEPTED)
