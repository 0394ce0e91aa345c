"""Sample upload offered to users as a starting point for their own file."""

SAMPLE_FILENAME = "ninety-sample-data.csv"

# Each family is introduced by its own header line. Only the first line of a
# file is treated as the header; the later ``type,...`` lines are ignored as
# rows of an unknown family.
SAMPLE_CSV = """\
type,metric,target,actual,status,owner
scorecard,Weekly Revenue,$65K,$68.2K,green,Sales Team
scorecard,New Leads,45,52,green,Marketing
scorecard,Conversion Rate,22%,24.8%,green,Sales Team
scorecard,Team Utilization,85%,78%,yellow,Operations
scorecard,Project Delivery,100%,95%,green,Project Mgmt
type,category,item,complete
vto,vision,Core Values Alignment,true
vto,vision,10-Year Target: $50M ARR,true
vto,vision,Market Leadership Position,false
vto,traction,Weekly Scorecard Green,false
vto,traction,Q4 Rocks 90% Complete,true
vto,objectives,25% YoY Revenue Growth,false
vto,objectives,Hire 5 Team Members,false
type,title,description,priority,department,owner,status,created,due
issue,Server Performance Issues,Slow response times affecting client deliverables,high,Operations,DevOps Team,overdue,2024-11-08,2024-11-10
issue,CRM Integration Delays,New CRM system integration is behind schedule,medium,Sales,IT Team,in-progress,2024-11-05,2024-11-15
issue,Office Space Optimization,Review and optimize current office layout,low,HR,Facilities,open,2024-11-03,2024-11-30
type,title,description,priority,assignee,dueDate,complete
todo,Review Q4 Marketing Budget,Analyze spend and adjust for Q1,medium,Marketing Director,2024-11-15,false
todo,Update Employee Handbook,Review and update company policies,low,HR Manager,2024-11-25,false
todo,Client Onboarding Process Review,Evaluate current onboarding process,high,Customer Success Lead,2024-11-12,false
"""
