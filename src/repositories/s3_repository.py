"""
S3 Repository for file storage operations.
Stores picked images directly in Amazon S3.
"""
import asyncio
import io
import uuid
from datetime import datetime
from typing import Optional
import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError
from src.core import config
from src.core.exceptions import UploadFailedException
from src.models.file_entry import FileRef, UploadResult
from src.repositories.upload_client import UploadClient


class S3Repository(UploadClient):
    """Upload client that writes images to an S3 bucket."""

    def __init__(self, bucket_name: Optional[str] = None):
        self.s3_client = boto3.client('s3', region_name=config.settings.aws_region)
        self.bucket_name = bucket_name or config.settings.s3_bucket_name

    async def upload(self, file_ref: FileRef) -> UploadResult:
        """
        Upload a file to S3 without blocking the event loop.

        Args:
            file_ref: Picked image

        Returns:
            UploadResult whose remote_id is the S3 key

        Raises:
            UploadFailedException: If upload fails
        """
        return await asyncio.to_thread(self.upload_file, file_ref)

    def upload_file(self, file_ref: FileRef) -> UploadResult:
        """Blocking S3 upload used by upload()."""
        try:
            # Generate unique S3 key
            s3_key = self._generate_s3_key(file_ref.name)

            self.s3_client.upload_fileobj(
                io.BytesIO(file_ref.content),
                self.bucket_name,
                s3_key,
                ExtraArgs={'ContentType': file_ref.content_type}
            )

            return UploadResult(
                remote_id=s3_key,
                metadata={
                    's3_location': f"s3://{self.bucket_name}/{s3_key}",
                    'bucket': self.bucket_name,
                    'upload_timestamp': datetime.utcnow().isoformat()
                }
            )

        except ClientError as e:
            reason = e.response.get('Error', {}).get('Message')
            raise UploadFailedException(f"Failed to upload file to S3: {str(e)}", reason=reason) from e
        except S3UploadFailedError as e:
            raise UploadFailedException(f"Failed to upload file to S3: {str(e)}") from e
        except (BotoCoreError, ValueError) as e:
            raise UploadFailedException(f"Unexpected error during S3 upload: {str(e)}") from e

    def _generate_s3_key(self, filename: str) -> str:
        """
        Generate unique S3 key for file.

        Format: uploads/YYYY/MM/DD/{uuid}_{filename}
        """
        now = datetime.utcnow()
        unique_id = uuid.uuid4().hex[:8]
        return f"uploads/{now.year}/{now.month:02d}/{now.day:02d}/{unique_id}_{filename}"
