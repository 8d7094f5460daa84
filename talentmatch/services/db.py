from typing import Any, Dict, List, Optional

import motor.motor_asyncio
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from talentmatch.models.models import Candidate, Job
from talentmatch.models.settings import DatabaseSettings
from talentmatch.utils.exceptions import DatabaseError
from talentmatch.utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_JOBS = [
    {
        "title": "Frontend Developer",
        "description": "We're looking for a React expert to join our team.",
        "requirements": "3+ years experience with React, TypeScript, and modern frontend tools.",
    },
    {
        "title": "Backend Engineer",
        "description": "Seeking a skilled Node.js developer for our backend team.",
        "requirements": "Experience with Node.js, Express, and database technologies. Knowledge of AWS services.",
    },
]

NO_ID = {"_id": 0}


def create_client(settings: DatabaseSettings):
    logger.info(f"Initializing MongoDB connection to database: {settings.db_name}")
    client = motor.motor_asyncio.AsyncIOMotorClient(settings.mongo_details)
    return client, client[settings.db_name]


class RecordStore:
    """Candidates and jobs keyed by integer id"""

    def __init__(self, db):
        self.db = db
        self.candidates_coll = db["candidates"]
        self.jobs_coll = db["jobs"]
        self.counters_coll = db["counters"]

    async def init_indexes(self):
        """Unique integer id on both record collections."""
        logger.info("Starting database index initialization")
        for coll in (self.candidates_coll, self.jobs_coll):
            try:
                await coll.create_index([("id", ASCENDING)], unique=True)
                logger.debug(f"Created unique index on {coll.name}.id")
            except PyMongoError as e:
                if "already exists" in str(e).lower():
                    logger.debug(f"Index on {coll.name}.id already exists")
                else:
                    logger.warning(f"Could not create unique index on {coll.name}.id: {e}")

    async def next_id(self, kind: str) -> int:
        try:
            counter = await self.counters_coll.find_one_and_update(
                {"_id": kind},
                {"$inc": {"seq": 1}},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise DatabaseError(f"Could not allocate {kind} id: {e}", operation="next_id", collection="counters", cause=e) from e
        return int(counter["seq"])

    # -------- Candidates --------
    async def list_candidates(self) -> List[Candidate]:
        try:
            docs = await self.candidates_coll.find({}, NO_ID).sort("id", ASCENDING).to_list(length=None)
        except PyMongoError as e:
            raise DatabaseError(f"Could not list candidates: {e}", operation="find", collection="candidates", cause=e) from e
        return [Candidate(**doc) for doc in docs]

    async def get_candidate(self, candidate_id: int) -> Optional[Candidate]:
        try:
            doc = await self.candidates_coll.find_one({"id": candidate_id}, NO_ID)
        except PyMongoError as e:
            raise DatabaseError(f"Could not read candidate {candidate_id}: {e}", operation="find_one", collection="candidates", cause=e) from e
        return Candidate(**doc) if doc else None

    async def add_candidate(self, fields: Dict[str, Any]) -> Candidate:
        candidate = Candidate(id=await self.next_id("candidate"), **fields)
        try:
            await self.candidates_coll.insert_one(candidate.model_dump())
        except PyMongoError as e:
            raise DatabaseError(f"Could not save candidate: {e}", operation="insert_one", collection="candidates", cause=e) from e
        logger.info(f"Candidate added: {candidate.id}")
        return candidate

    async def update_candidate(self, candidate_id: int, changes: Dict[str, Any]) -> Optional[Candidate]:
        """Apply non-empty ``changes``; returns None when the candidate does not exist"""
        changes = {k: v for k, v in changes.items() if v not in (None, "")}
        try:
            if not changes:
                doc = await self.candidates_coll.find_one({"id": candidate_id}, NO_ID)
            else:
                doc = await self.candidates_coll.find_one_and_update(
                    {"id": candidate_id},
                    {"$set": changes},
                    projection=NO_ID,
                    return_document=ReturnDocument.AFTER,
                )
        except PyMongoError as e:
            raise DatabaseError(f"Could not update candidate {candidate_id}: {e}", operation="update", collection="candidates", cause=e) from e
        return Candidate(**doc) if doc else None

    async def delete_candidate(self, candidate_id: int) -> Optional[Candidate]:
        try:
            doc = await self.candidates_coll.find_one_and_delete({"id": candidate_id}, projection=NO_ID)
        except PyMongoError as e:
            raise DatabaseError(f"Could not delete candidate {candidate_id}: {e}", operation="delete", collection="candidates", cause=e) from e
        return Candidate(**doc) if doc else None

    # -------- Jobs --------
    async def list_jobs(self) -> List[Job]:
        try:
            docs = await self.jobs_coll.find({}, NO_ID).sort("id", ASCENDING).to_list(length=None)
        except PyMongoError as e:
            raise DatabaseError(f"Could not list jobs: {e}", operation="find", collection="jobs", cause=e) from e
        return [Job(**doc) for doc in docs]

    async def get_job(self, job_id: int) -> Optional[Job]:
        try:
            doc = await self.jobs_coll.find_one({"id": job_id}, NO_ID)
        except PyMongoError as e:
            raise DatabaseError(f"Could not read job {job_id}: {e}", operation="find_one", collection="jobs", cause=e) from e
        return Job(**doc) if doc else None

    async def add_job(self, fields: Dict[str, Any]) -> Job:
        job = Job(id=await self.next_id("job"), **fields)
        try:
            await self.jobs_coll.insert_one(job.model_dump())
        except PyMongoError as e:
            raise DatabaseError(f"Could not save job: {e}", operation="insert_one", collection="jobs", cause=e) from e
        logger.info(f"Job added: {job.id}")
        return job

    async def seed_default_jobs(self) -> int:
        """Insert the starter jobs when the collection is empty"""
        try:
            existing = await self.jobs_coll.count_documents({})
        except PyMongoError as e:
            raise DatabaseError(f"Could not count jobs: {e}", operation="count_documents", collection="jobs", cause=e) from e
        if existing > 0:
            return 0
        for fields in DEFAULT_JOBS:
            await self.add_job(fields)
        logger.info(f"Seeded {len(DEFAULT_JOBS)} default jobs")
        return len(DEFAULT_JOBS)
