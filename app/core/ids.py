import uuid

def gen_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


def storage_key(folder: str, extension: str) -> str:
    # e.g. "offices/3f2a...c1.png"
    return f"{folder}/{uuid.uuid4().hex}.{extension}"
