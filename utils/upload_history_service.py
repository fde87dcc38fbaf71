"""
Upload history ledger: one row per bulk upload batch, and the compensating batch delete
"""

import logging
import uuid
from sqlalchemy.exc import SQLAlchemyError
from models import db, Idea, UploadHistory
from utils.caching import invalidate_filter_cache
from utils.error_handling import NotFound, BatchDeleteFailed
from utils.idea_service import delete_idea_rows

logger = logging.getLogger(__name__)


class UploadHistoryService:
    """Service class for the upload ledger"""

    def create_upload_record(self, filename, uploaded_by, file_size=None, content_type=None):
        """Register a new batch before parsing so failed parses stay traceable"""
        upload = UploadHistory(
            filename=filename,
            batch_id=str(uuid.uuid4()),
            ideas_count=0,
            file_size=file_size,
            content_type=content_type,
            uploaded_by=uploaded_by,
            status='PROCESSING'
        )
        db.session.add(upload)
        db.session.commit()
        logger.info(f"Registered upload batch {upload.batch_id} for {filename} by {uploaded_by}")
        return upload

    def finalize_upload(self, upload, ideas_count, status='COMPLETED'):
        upload.ideas_count = ideas_count
        upload.status = status
        db.session.commit()
        return upload

    def get_all_upload_history(self):
        return UploadHistory.query.order_by(UploadHistory.upload_timestamp.desc(), UploadHistory.id.desc()).all()

    def get_upload_by_batch_id(self, batch_id):
        upload = UploadHistory.query.filter_by(batch_id=batch_id).first()
        if not upload:
            raise NotFound(f"Upload batch not found: {batch_id}")
        return upload

    def get_upload_stats(self):
        total_uploads = db.session.query(db.func.count(UploadHistory.id)).scalar() or 0
        total_ideas = db.session.query(db.func.sum(UploadHistory.ideas_count)).scalar() or 0
        return {
            'totalUploads': int(total_uploads),
            'totalIdeasUploaded': int(total_ideas),
        }

    def delete_upload_batch(self, batch_id):
        """
        Delete every idea created by the batch and the ledger row, all or nothing.

        Returns:
            (deleted idea count, filename)

        Raises:
            NotFound: no ledger row carries this batch id
            BatchDeleteFailed: any statement failed; nothing was committed
        """
        upload = UploadHistory.query.filter_by(batch_id=batch_id).first()
        if not upload:
            raise NotFound(f"Upload batch not found: {batch_id}")

        filename = upload.filename
        try:
            idea_ids = [row.id for row in db.session.query(Idea.id).filter(Idea.upload_batch_id == batch_id)]
            deleted = delete_idea_rows(idea_ids)
            db.session.delete(upload)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to delete upload batch {batch_id}: {str(e)}")
            raise BatchDeleteFailed(f"Failed to delete upload batch: {str(e)}", cause=e)

        invalidate_filter_cache()
        logger.info(f"Deleted upload batch {batch_id} ({filename}) with {deleted} ideas")
        return deleted, filename
