import unittest

from student_mapper import map_api_status, project_api_student


class StudentProjectionTests(unittest.TestCase):
    def test_enrolled_server_record_maps_to_offer_received(self):
        record = {
            "id": "9b0c",
            "firstName": "A",
            "lastName": "B",
            "email": "ab@example.com",
            "phone": "+977-1",
            "status": "Enrolled",
            "nationality": "Nepali",
            "educationLevel": "Bachelor",
            "budget": "25000",
            "notes": None,
            "createdAt": "2024-02-01T00:00:00Z",
        }
        student = project_api_student(record)

        self.assertEqual(student["status"], "Offer Received")
        self.assertEqual(student["name"], "A B")
        self.assertEqual(student["targetCountry"], "USA")
        self.assertEqual(student["nocStatus"], "Not Applied")
        self.assertEqual(student["documents"], {})
        self.assertEqual(student["notes"], "")
        self.assertEqual(student["createdAt"], 1706745600000)
        self.assertEqual(student["nationality"], "Nepali")
        self.assertIsNone(student["address"])
        self.assertNotIn("firstName", student)

    def test_status_mapping_defaults_to_lead(self):
        self.assertEqual(map_api_status("Lead"), "Lead")
        self.assertEqual(map_api_status("Applied"), "Applied")
        self.assertEqual(map_api_status("Rejected"), "Visa Rejected")
        self.assertEqual(map_api_status("Prospect"), "Lead")
        self.assertEqual(map_api_status("On Hold"), "Lead")
        self.assertEqual(map_api_status(None), "Lead")

    def test_unparsable_created_at_becomes_none(self):
        self.assertIsNone(project_api_student({"createdAt": "yesterday"})["createdAt"])
        self.assertIsNone(project_api_student({})["createdAt"])

    def test_non_mapping_record_is_rejected(self):
        with self.assertRaises(ValueError):
            project_api_student(["A", "B"])


if __name__ == "__main__":
    unittest.main()
