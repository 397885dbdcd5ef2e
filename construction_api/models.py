from sqlalchemy import Column, Integer, String, ForeignKey, Text
from sqlalchemy.orm import relationship
from .database import Base, ExactDecimal, UTCDateTime


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, default="")
    budget = Column(ExactDecimal, nullable=False, default=0)
    start_date = Column(UTCDateTime)
    end_date = Column(UTCDateTime)
    status = Column(String, nullable=False, default="")

    tasks = relationship("Task", back_populates="project", cascade="all, delete")
    employees = relationship("Employee", back_populates="project", cascade="all, delete")


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    start_date = Column(UTCDateTime)
    end_date = Column(UTCDateTime)
    status = Column(String, nullable=False, default="")

    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)

    project = relationship("Project", back_populates="tasks")
    usages = relationship("ResourceUsage", back_populates="task", cascade="all, delete")


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")
    role = Column(String, nullable=False, default="")

    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)

    project = relationship("Project", back_populates="employees")


class Resource(Base):
    __tablename__ = "resources"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    quantity = Column(Integer, nullable=False, default=0)
    unit_cost = Column(ExactDecimal, nullable=False, default=0)

    usages = relationship("ResourceUsage", back_populates="resource", cascade="all, delete")


class ResourceUsage(Base):
    __tablename__ = "resource_usages"

    id = Column(Integer, primary_key=True, index=True)
    quantity_used = Column(Integer, nullable=False, default=0)
    usage_date = Column(UTCDateTime)

    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)
    resource_id = Column(Integer, ForeignKey("resources.id"), nullable=False, index=True)

    task = relationship("Task", back_populates="usages")
    resource = relationship("Resource", back_populates="usages")
