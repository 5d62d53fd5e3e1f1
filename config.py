from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


UNIT_SECONDS = {"seconds": 1, "minutes": 60}


class Config(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    url: str = "http://www.example.net/path/dotfile"  # file to retrieve and check for '.'

    # mail to be sent
    mail_from: str = Field("from@some.host.net", alias="mail.from")
    mail_to: str = Field("to@another.host.org", alias="mail.to")
    subject: str = Field("subject text", alias="mail.subject")
    body: str = Field("Contents\nof the mail body.\n", alias="mail.body")
    host: str = Field("smtp.mailserver.org", alias="mail.host")  # mailserver hostname
    port: int = Field(25, alias="mail.port")

    cycle_length: float = Field(10, alias="cycle.length")
    cycle_unit: Literal["seconds", "minutes"] = Field("minutes", alias="cycle.unit")

    @property
    def interval(self) -> float:
        """Raw poll interval in seconds, before the minimum is applied."""
        return self.cycle_length * UNIT_SECONDS[self.cycle_unit]
