"""Auth repository - Database operations for accounts"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Admin, Student


class AccountRepository:
    """Repository for student and admin account lookups"""

    @staticmethod
    def get_student_by_email(db: Session, email: str) -> Optional[Student]:
        return db.query(Student).filter(Student.email == email).first()

    @staticmethod
    def get_admin_by_email(db: Session, email: str) -> Optional[Admin]:
        return db.query(Admin).filter(Admin.email == email).first()

    @staticmethod
    def create_student(db: Session, **student_data) -> Student:
        student = Student(**student_data)
        db.add(student)
        db.commit()
        db.refresh(student)
        return student

    @staticmethod
    def create_admin(db: Session, **admin_data) -> Admin:
        admin = Admin(**admin_data)
        db.add(admin)
        db.commit()
        db.refresh(admin)
        return admin
