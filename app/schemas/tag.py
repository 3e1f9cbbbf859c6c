from pydantic import BaseModel


class TagOut(BaseModel):
    id: int
    name: str


class TagCollection(BaseModel):
    data: list[TagOut]
