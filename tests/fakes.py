"""In-memory stand-ins for external clients."""

from botocore.exceptions import ClientError


class FakeS3Client:
    """Records calls the way boto3's s3 client would receive them."""

    def __init__(self, fail=False):
        self.fail = fail
        self.put_calls = []
        self.sign_calls = []

    def put_object(self, **kwargs):
        if self.fail:
            raise ClientError({"Error": {"Code": "AccessDenied"}}, "PutObject")
        self.put_calls.append(kwargs)
        return {"ETag": '"abc"'}

    def generate_presigned_url(self, operation, Params, ExpiresIn, HttpMethod):
        self.sign_calls.append((operation, Params, ExpiresIn, HttpMethod))
        return f"https://bucket.oss.test/{Params['Key']}?signature=x"
