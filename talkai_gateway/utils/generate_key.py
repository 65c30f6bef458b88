import uuid

def generate_key():
    # sk-talkai-<uuid4>
    return f"sk-talkai-{uuid.uuid4()}"
